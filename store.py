# store.py
"""
基于两个 JSON 文件的单词/分类存储

每次修改都整体重写文件，不做并发控制。所有校验失败抛出 StoreError，
由 app.py 转换成 {"success": false, "message": ...} 响应。
"""
import json
import logging
import os

from models import STATUS_COUNT

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """存储层校验错误，status 为返回给客户端的 HTTP 状态码"""

    def __init__(self, message, status=400):
        super().__init__(message)
        self.message = message
        self.status = status


class NotFoundError(StoreError):
    # 找不到记录时原接口返回 200 + success=false
    def __init__(self, message):
        super().__init__(message, status=200)


def _id_key(record):
    try:
        return int(record.get('id'))
    except (TypeError, ValueError):
        return 0


def _next_id(records):
    ids = [_id_key(r) for r in records]
    return str(max(ids) + 1 if ids else 1)


def _require(params, *names, message='Missing parameters'):
    for name in names:
        if params.get(name) is None:
            raise StoreError(message)
    return [params[name] for name in names]


def _to_bool(value):
    # 兼容表单提交的 "1"/"0"、"true"/"false"
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


def _to_index(value, message):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise StoreError(message)


class JsonStore:
    def __init__(self, data_dir, words_file='words.json', categories_file='categories.json'):
        self.data_dir = data_dir
        self.words_path = os.path.join(data_dir, words_file)
        self.categories_path = os.path.join(data_dir, categories_file)

    # --- 文件读写 ---

    def _read(self, path):
        if not os.path.exists(path):
            return []
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
        if not content.strip():
            return []
        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            logger.warning('数据文件损坏，按空列表处理: %s', path)
            return []
        return data if isinstance(data, list) else []

    def _write(self, path, records, what):
        records = sorted(records, key=_id_key)
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(records, f, indent=4, ensure_ascii=False)
        except OSError as e:
            logger.error('写入 %s 失败: %s', path, e)
            raise StoreError(f'Error saving {what}', status=500)
        return {'success': True, 'message': f'{what.capitalize()} saved successfully'}

    def get_words(self):
        return self._read(self.words_path)

    def get_categories(self):
        return self._read(self.categories_path)

    def save_words(self, words):
        return self._write(self.words_path, words, 'words')

    def save_categories(self, categories):
        return self._write(self.categories_path, categories, 'categories')

    def _update_word(self, word_id, mutate):
        words = self.get_words()
        for word in words:
            if str(word.get('id')) == str(word_id):
                mutate(word)
                return self.save_words(words)
        raise NotFoundError(f'Word with ID {word_id} not found')

    # --- 单词操作 ---

    def add_word(self, params):
        text, = _require(params, 'text', message='Missing text parameter')
        words = self.get_words()
        new_word = {
            'id': _next_id(words),
            'text': text,
            'statuses': [False] * STATUS_COUNT,
            'categoryIds': [],
            'confusingWords': [],
            'isImportant': False,
            'isExpression': False,
            'eyeClickCount': 0,
        }
        words.append(new_word)
        result = self.save_words(words)
        result['word'] = new_word
        return result

    def delete_word(self, params):
        word_id, = _require(params, 'wordId', message='Missing wordId parameter')
        words = self.get_words()
        remaining = [w for w in words if str(w.get('id')) != str(word_id)]
        if len(remaining) == len(words):
            raise NotFoundError(f'Word with ID {word_id} not found')
        return self.save_words(remaining)

    def update_word_status(self, params):
        word_id, status_index, checked = _require(params, 'wordId', 'statusIndex', 'checked')
        index = _to_index(status_index, 'Invalid status index')

        def mutate(word):
            statuses = word.get('statuses')
            if not isinstance(statuses, list) or not 0 <= index < len(statuses):
                raise StoreError('Invalid status index')
            statuses[index] = _to_bool(checked)

        return self._update_word(word_id, mutate)

    def update_word_text(self, params):
        word_id, new_text = _require(params, 'wordId', 'newText')
        return self._update_word(word_id, lambda w: w.__setitem__('text', new_text))

    def append_word_text(self, params):
        word_id, text_to_append = _require(params, 'wordId', 'textToAppend')

        def mutate(word):
            word['text'] = f"{word.get('text', '')} -- {text_to_append}"

        return self._update_word(word_id, mutate)

    def import_words(self, params):
        words = params.get('words')
        if isinstance(words, str):
            # 表单提交时 words 是 JSON 字符串
            try:
                words = json.loads(words)
            except json.JSONDecodeError:
                words = None
        if not isinstance(words, list):
            raise StoreError('Invalid words array')
        result = self.save_words(words)
        categories = params.get('categories')
        if isinstance(categories, list):
            self.save_categories(categories)
        return result

    def update_word_categories(self, params):
        word_id = params.get('wordId')
        category_ids = params.get('categoryIds')
        if isinstance(category_ids, str):
            try:
                category_ids = json.loads(category_ids)
            except json.JSONDecodeError:
                category_ids = None
        if word_id is None or not isinstance(category_ids, list):
            raise StoreError('Missing wordId or invalid categoryIds parameter')
        ids = [str(c) for c in category_ids]
        return self._update_word(word_id, lambda w: w.__setitem__('categoryIds', ids))

    def toggle_word_importance(self, params):
        word_id, = _require(params, 'wordId', message='Missing wordId parameter')
        return self._update_word(word_id, lambda w: w.__setitem__('isImportant', not w.get('isImportant', False)))

    def toggle_word_expression(self, params):
        word_id, = _require(params, 'wordId', message='Missing wordId parameter')
        return self._update_word(word_id, lambda w: w.__setitem__('isExpression', not w.get('isExpression', False)))

    def increment_eye_click_count(self, params):
        word_id, = _require(params, 'wordId', message='Missing wordId parameter')
        return self._update_word(word_id, lambda w: w.__setitem__('eyeClickCount', int(w.get('eyeClickCount') or 0) + 1))

    def add_confusing_word(self, params):
        word_id, confusing_word = _require(params, 'wordId', 'confusingWord')

        def mutate(word):
            word['confusingWords'] = list(word.get('confusingWords') or []) + [confusing_word]

        return self._update_word(word_id, mutate)

    def remove_confusing_word(self, params):
        word_id, raw_index = _require(params, 'wordId', 'confusingWordIndex')
        index = _to_index(raw_index, 'Invalid confusing word index')

        def mutate(word):
            confusing = list(word.get('confusingWords') or [])
            if not 0 <= index < len(confusing):
                raise StoreError('Invalid confusing word index')
            del confusing[index]
            word['confusingWords'] = confusing

        return self._update_word(word_id, mutate)

    # --- 分类操作 ---

    def add_category(self, params):
        name, color = _require(params, 'name', 'color', message='Missing name or color parameter for addCategory')
        categories = self.get_categories()
        new_category = {'id': _next_id(categories), 'name': name, 'color': color}
        categories.append(new_category)
        result = self.save_categories(categories)
        result['category'] = new_category
        return result

    def update_category(self, params):
        category_id, name, color = _require(params, 'id', 'name', 'color',
                                            message='Missing parameters for updateCategory')
        categories = self.get_categories()
        for category in categories:
            if str(category.get('id')) == str(category_id):
                category['name'] = name
                category['color'] = color
                return self.save_categories(categories)
        raise NotFoundError(f'Category with ID {category_id} not found')

    def delete_category(self, params):
        category_id, = _require(params, 'id', message='Missing id parameter for deleteCategory')
        categories = self.get_categories()
        remaining = [c for c in categories if str(c.get('id')) != str(category_id)]
        if len(remaining) == len(categories):
            raise NotFoundError(f'Category with ID {category_id} not found')
        result = self.save_categories(remaining)

        # 级联：从所有单词里移除该分类
        words = self.get_words()
        modified = False
        for word in words:
            ids = word.get('categoryIds')
            if isinstance(ids, list):
                kept = [c for c in ids if str(c) != str(category_id)]
                if len(kept) != len(ids):
                    word['categoryIds'] = kept
                    modified = True
        if modified:
            self.save_words(words)
        return result

    # --- 分发 ---

    ACTIONS = {
        'addWord': 'add_word',
        'deleteWord': 'delete_word',
        'updateWordStatus': 'update_word_status',
        'updateWordText': 'update_word_text',
        'appendWordText': 'append_word_text',
        'importWords': 'import_words',
        'updateWordCategories': 'update_word_categories',
        'toggleWordImportance': 'toggle_word_importance',
        'toggleWordExpression': 'toggle_word_expression',
        'incrementEyeClickCount': 'increment_eye_click_count',
        'addConfusingWord': 'add_confusing_word',
        'removeConfusingWord': 'remove_confusing_word',
        'addCategory': 'add_category',
        'updateCategory': 'update_category',
        'deleteCategory': 'delete_category',
    }

    def dispatch(self, action, params):
        if action == 'getWords':
            return self.get_words()
        if action == 'getCategories':
            return self.get_categories()
        method = self.ACTIONS.get(action)
        if method is None:
            raise StoreError('Unknown action')
        return getattr(self, method)(params)
