# sample_data.py
# 本地缓存不存在时使用的示例数据

INITIAL_CATEGORIES = [
    {'id': '1', 'name': 'Greetings', 'color': '#10b981'},
    {'id': '2', 'name': 'Home', 'color': '#3b82f6'},
]

INITIAL_WORDS = [
    {'id': '1', 'text': 'مرحبا -- hello', 'statuses': [False, False, False, False], 'categoryIds': ['1']},
    {'id': '2', 'text': 'شكرا -- thank you', 'statuses': [False, False, False, False], 'categoryIds': ['1']},
    {'id': '3', 'text': 'بيت -- house', 'statuses': [False, False, False, False], 'categoryIds': ['2']},
    {'id': '4', 'text': 'باب -- door', 'statuses': [False, False, False, False], 'categoryIds': ['2']},
    {'id': '5', 'text': 'إن شاء الله -- God willing', 'statuses': [False, False, False, False],
     'isExpression': True},
]
