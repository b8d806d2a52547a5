# transfer.py
"""导入 / 导出 JSON 文档"""
import json

import chardet

from models import Category, Word, normalize_categories, normalize_words


class ImportFormatError(ValueError):
    pass


def export_document(words, categories):
    return {
        'words': [w.to_dict() if isinstance(w, Word) else w for w in words],
        'categories': [c.to_dict() if isinstance(c, Category) else c for c in categories],
    }


def dump_document(words, categories):
    return json.dumps(export_document(words, categories), indent=2, ensure_ascii=False)


def decode_bytes(raw_data):
    """先按 utf-8 解码，失败时用 chardet 自动检测编码"""
    try:
        content = raw_data.decode('utf-8-sig')
    except UnicodeDecodeError:
        result = chardet.detect(raw_data)
        encoding = result['encoding']
        if not encoding or result['confidence'] < 0.3:
            raise ImportFormatError('Unable to detect file encoding')
        try:
            content = raw_data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            raise ImportFormatError('Unable to detect file encoding')

    if '\x00' in content:
        raise ImportFormatError('Invalid file content: binary data detected')
    return content


def parse_document(raw):
    """
    解析导入文件，支持 {words, categories} 或单纯的单词数组。
    任何格式错误都在这里抛出，调用方还没有修改任何状态。
    """
    content = decode_bytes(raw) if isinstance(raw, (bytes, bytearray)) else raw
    if not content or not content.strip():
        raise ImportFormatError('Import file is empty')

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f'Invalid JSON file: {e.msg}')

    if isinstance(data, list):
        raw_words, raw_categories = data, []
    elif isinstance(data, dict) and isinstance(data.get('words'), list):
        raw_words = data['words']
        raw_categories = data.get('categories') or []
    else:
        raise ImportFormatError('Invalid JSON file: expected a word array or {words, categories}')

    if not isinstance(raw_categories, list):
        raise ImportFormatError('Invalid JSON file: categories must be an array')
    if not all(isinstance(w, dict) for w in raw_words):
        raise ImportFormatError('Invalid JSON file: every word must be an object')
    if not all(isinstance(c, dict) for c in raw_categories):
        raise ImportFormatError('Invalid JSON file: every category must be an object')

    if not all(isinstance(w.get('text') or '', str) for w in raw_words):
        raise ImportFormatError('Invalid JSON file: word text must be a string')
    if not all(isinstance(c.get('name') or '', str) for c in raw_categories):
        raise ImportFormatError('Invalid JSON file: category name must be a string')

    # 字段类型不对（如 eyeClickCount 不是数字）也算格式错误
    try:
        return normalize_words(raw_words), normalize_categories(raw_categories)
    except (TypeError, ValueError) as e:
        raise ImportFormatError(f'Invalid JSON file: {e}')
