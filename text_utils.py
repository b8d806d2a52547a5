# text_utils.py
import re

# Arabic, Arabic Supplement, Arabic Extended-A, Presentation Forms-A/B
ARABIC_RANGES = '\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF'

ARABIC_CHAR_PATTERN = re.compile(f'[{ARABIC_RANGES}]')
ARABIC_RUN_PATTERN = re.compile(f'[{ARABIC_RANGES}]+')
LATIN_CHAR_PATTERN = re.compile(r'[a-zA-Z]')


def contains_arabic(text):
    return bool(ARABIC_CHAR_PATTERN.search(text or ''))


def contains_latin(text):
    """只检查 ASCII 字母，纯数字或标点返回 False"""
    return bool(LATIN_CHAR_PATTERN.search(text or ''))


def extract_arabic(text):
    return ' '.join(ARABIC_RUN_PATTERN.findall(text or ''))


def extract_non_arabic(text):
    return ARABIC_RUN_PATTERN.sub('', text or '').strip()
