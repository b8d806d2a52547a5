# models.py
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List

STATUS_LABELS = ['Recognize', 'Understand', 'Recall', 'Use Fluently']
STATUS_COUNT = len(STATUS_LABELS)


def normalize_statuses(statuses):
    """长度不是 4 的状态数组一律重置为全 False"""
    if isinstance(statuses, (list, tuple)) and len(statuses) == STATUS_COUNT:
        return [bool(s) for s in statuses]
    return [False] * STATUS_COUNT


@dataclass
class Word:
    id: str
    text: str
    statuses: List[bool] = field(default_factory=lambda: [False] * STATUS_COUNT)
    category_ids: List[str] = field(default_factory=list)
    confusing_words: List[str] = field(default_factory=list)
    is_important: bool = False
    is_expression: bool = False
    eye_click_count: int = 0

    @property
    def mastery_count(self):
        return sum(1 for s in self.statuses if s)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data.get('id', '')),
            text=data.get('text') or '',
            statuses=normalize_statuses(data.get('statuses')),
            category_ids=[str(c) for c in (data.get('categoryIds') or [])],
            confusing_words=list(data.get('confusingWords') or []),
            is_important=bool(data.get('isImportant') or False),
            is_expression=bool(data.get('isExpression') or False),
            eye_click_count=int(data.get('eyeClickCount') or 0),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'text': self.text,
            'statuses': list(self.statuses),
            'categoryIds': list(self.category_ids),
            'confusingWords': list(self.confusing_words),
            'isImportant': self.is_important,
            'isExpression': self.is_expression,
            'eyeClickCount': self.eye_click_count,
        }

    def copy(self, **changes):
        # 列表字段需要复制，避免乐观更新时改到原对象
        base = replace(
            self,
            statuses=list(self.statuses),
            category_ids=list(self.category_ids),
            confusing_words=list(self.confusing_words),
        )
        return replace(base, **changes) if changes else base


@dataclass
class Category:
    id: str
    name: str
    color: str = '#000000'

    @classmethod
    def from_dict(cls, data):
        return cls(id=str(data.get('id', '')), name=data.get('name') or '', color=data.get('color') or '#000000')

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'color': self.color}


def normalize_words(items):
    return [item if isinstance(item, Word) else Word.from_dict(item) for item in items or []]


def normalize_categories(items):
    return [item if isinstance(item, Category) else Category.from_dict(item) for item in items or []]


# --- 存储调用结果 ---

@dataclass(frozen=True)
class Ok:
    value: Any = None
    message: str = ''

    ok = True
    blocked = False


@dataclass(frozen=True)
class Err:
    message: str
    blocked: bool = False

    ok = False
    value = None


class MutationPolicy(Enum):
    # 远程失败时保留本地乐观状态
    DURABLE = 'applied-locally-durable'
    # 远程失败时重新拉取规范数据，丢弃乐观状态
    RECONCILE = 'applied-locally-must-reconcile'
