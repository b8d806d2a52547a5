# masking.py
"""
学习模式下的遮挡逻辑

按空白切分文本，根据学习模式把阿拉伯文或英文 token 标记为遮挡，
由界面层决定如何显示（默认 HTML 输出为 blur）。
"""
import html
import re
from dataclasses import dataclass

from text_utils import contains_arabic, contains_latin

SHOW_ALL = 'show-all'
HIDE_ENGLISH = 'hide-english'
HIDE_ARABIC = 'hide-arabic'
STUDY_MODES = (SHOW_ALL, HIDE_ENGLISH, HIDE_ARABIC)

WHITESPACE_SPLIT = re.compile(r'(\s+)')

MASK_STYLE = 'filter: blur(4px);'
EXPRESSION_STYLE = 'color: #10b981; font-weight: 500;'


@dataclass(frozen=True)
class Token:
    text: str
    masked: bool = False
    expression: bool = False


def _should_hide(part, mode):
    if mode == HIDE_ARABIC:
        return contains_arabic(part)
    if mode == HIDE_ENGLISH:
        return contains_latin(part)
    return False


def mask_tokens(text, mode, revealed=False, is_expression=False):
    if mode not in STUDY_MODES:
        raise ValueError(f'Unknown study mode: {mode}')
    if is_expression:
        return [Token(text, expression=True)]
    if mode == SHOW_ALL:
        return [Token(text)]

    tokens = []
    for part in WHITESPACE_SPLIT.split(text):
        if part == '':
            continue
        if not part.strip():
            # 空白原样保留
            tokens.append(Token(part))
            continue
        tokens.append(Token(part, masked=_should_hide(part, mode) and not revealed))
    return tokens


def render_html(tokens):
    out = []
    for token in tokens:
        escaped = html.escape(token.text)
        if token.expression:
            out.append(f'<span style="{EXPRESSION_STYLE}">{escaped}</span>')
        elif token.masked:
            out.append(f'<span style="{MASK_STYLE}">{escaped}</span>')
        else:
            out.append(escaped)
    return ''.join(out)


def can_be_hidden(text, mode):
    """当前模式下该词条是否有可隐藏的内容（决定是否显示眼睛按钮）"""
    return (mode == HIDE_ARABIC and contains_arabic(text)) or (mode == HIDE_ENGLISH and contains_latin(text))


class RevealState:
    """单行的显示/隐藏状态，学习模式切换时由持有者重置"""

    def __init__(self):
        self.revealed = False

    def toggle(self):
        # 只有从隐藏变为显示时返回 True，用于统计眼睛点击次数
        was_revealed = self.revealed
        self.revealed = not was_revealed
        return not was_revealed

    def reset(self):
        self.revealed = False
