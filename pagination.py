# pagination.py
import math
import random

PAGE_SIZE = 15


def total_pages(count, page_size=PAGE_SIZE):
    return math.ceil(count / page_size)


def shuffled_page_order(pages, rng=None):
    """页码 1..pages 的随机排列（Fisher-Yates）"""
    order = list(range(1, pages + 1))
    (rng or random).shuffle(order)
    return order


def resolve_page_offset(page, order=None):
    """
    把点击的页码换算成实际的窗口偏移（从 0 开始）。
    打乱页序时取页码在排列中的位置，而不是直接用页码本身。
    """
    if order:
        return order.index(page)
    return page - 1


def page_window(items, page, order=None, page_size=PAGE_SIZE):
    if order and page not in order:
        return []
    start = resolve_page_offset(page, order) * page_size
    return items[start:start + page_size]


def is_valid_page(value, pages):
    """跳转输入只接受 [1, pages] 内的整数"""
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return False
        value = int(value)
    return isinstance(value, int) and 1 <= value <= pages
