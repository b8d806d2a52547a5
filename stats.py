# stats.py
import math

from models import STATUS_COUNT, STATUS_LABELS
from text_utils import contains_arabic

MASTERY_LEVELS = ['Not Started', 'Beginner', 'Intermediate', 'Advanced', 'Mastered']


def percent(part, whole):
    """四舍五入的百分比，whole 为 0 时返回 0"""
    if not whole:
        return 0
    return int(math.floor(part * 100 / whole + 0.5))


def mastery_level(word):
    return MASTERY_LEVELS[word.mastery_count]


def compute_statistics(words):
    total = len(words)
    status_counts = [0] * STATUS_COUNT
    mastery_counts = [0] * len(MASTERY_LEVELS)

    for word in words:
        for index, checked in enumerate(word.statuses):
            if checked:
                status_counts[index] += 1
        mastery_counts[word.mastery_count] += 1

    checked_total = sum(status_counts)
    return {
        'total_words': total,
        'words_with_arabic': sum(1 for w in words if contains_arabic(w.text)),
        'overall_progress': percent(checked_total, total * STATUS_COUNT),
        'statuses': [
            {'label': label, 'count': count, 'percentage': percent(count, total)}
            for label, count in zip(STATUS_LABELS, status_counts)
        ],
        'mastery': [
            {'name': name, 'count': count, 'percentage': percent(count, total)}
            for name, count in zip(MASTERY_LEVELS, mastery_counts)
        ],
    }
