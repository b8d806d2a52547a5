# services.py
"""
单词存储的客户端访问层

所有请求都发到同一个接口，用 action 字段区分操作。读操作失败时退回本地缓存
（缓存不存在时用示例数据），写操作成功后重新拉取单词和分类以同步缓存；
状态勾选和重要标记这两个轻量操作只在本地缓存里增量修改。
"""
import json
import logging
import os

import requests

from config import Config
from models import Category, Err, Ok, Word, normalize_categories, normalize_words
from sample_data import INITIAL_CATEGORIES, INITIAL_WORDS

logger = logging.getLogger(__name__)

# 网络失败时给用户看的通用提示
ACTION_LABELS = {
    'addWord': 'add new word',
    'deleteWord': 'delete word',
    'updateWordStatus': 'update word status',
    'updateWordText': 'update word text',
    'appendWordText': 'append word text',
    'importWords': 'import words',
    'updateWordCategories': 'update word categories',
    'toggleWordImportance': 'update word importance',
    'toggleWordExpression': 'update word expression status',
    'incrementEyeClickCount': 'update eye click count',
    'addConfusingWord': 'add confusing word',
    'removeConfusingWord': 'remove confusing word',
    'addCategory': 'add category',
    'updateCategory': 'update category',
    'deleteCategory': 'delete category',
}


class ApiUnavailableError(Exception):
    """请求没有拿到可用的 JSON 响应"""


class VocabApiClient:
    def __init__(self, api_url=None, cache_file=None, user=None, password=None, timeout=None):
        self.api_url = api_url or Config.API_URL
        self.cache_file = cache_file or Config.CACHE_FILE
        user = Config.API_USER if user is None else user
        password = Config.API_PASSWORD if password is None else password
        self.auth = (user, password) if user else None
        self.timeout = timeout if timeout is not None else Config.API_TIMEOUT

    # --- 本地缓存 ---

    def load_cache(self):
        """返回 (words, categories)，缓存缺失或损坏时使用示例数据"""
        data = {}
        if os.path.exists(self.cache_file):
            try:
                with open(self.cache_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning('读取本地缓存失败，使用示例数据: %s', e)
                data = {}
        if not isinstance(data, dict):
            data = {}
        words = data.get(Config.WORDS_CACHE_KEY)
        categories = data.get(Config.CATEGORIES_CACHE_KEY)
        if not isinstance(words, list):
            words = INITIAL_WORDS
        if not isinstance(categories, list):
            categories = INITIAL_CATEGORIES
        return normalize_words(words), normalize_categories(categories)

    def save_cache(self, words, categories):
        data = {
            Config.WORDS_CACHE_KEY: [w.to_dict() for w in words],
            Config.CATEGORIES_CACHE_KEY: [c.to_dict() for c in categories],
        }
        try:
            cache_dir = os.path.dirname(self.cache_file)
            if cache_dir:
                os.makedirs(cache_dir, exist_ok=True)
            with open(self.cache_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False)
        except OSError as e:
            # 缓存写不进去不影响主流程
            logger.warning('写入本地缓存失败: %s', e)

    # --- HTTP ---

    def _call(self, action, params=None):
        payload = {'action': action}
        payload.update(params or {})
        response = requests.post(self.api_url, json=payload, auth=self.auth, timeout=self.timeout)
        try:
            data = response.json()
        except ValueError:
            raise ApiUnavailableError(f'{action} returned invalid JSON ({response.status_code})')
        return response.status_code, data

    def _fetch_list(self, action):
        status, data = self._call(action)
        if status >= 400 or not isinstance(data, list):
            raise ApiUnavailableError(f'{action} failed ({status})')
        return data

    def refresh_all(self):
        """重新拉取单词和分类并写入缓存，失败时保留原缓存"""
        try:
            words = normalize_words(self._fetch_list('getWords'))
            categories = normalize_categories(self._fetch_list('getCategories'))
        except (requests.RequestException, ApiUnavailableError) as e:
            logger.warning('同步缓存失败: %s', e)
            return None
        self.save_cache(words, categories)
        return words, categories

    def _write(self, action, params, refresh=True):
        try:
            status, data = self._call(action, params)
        except (requests.RequestException, ApiUnavailableError) as e:
            logger.warning('%s 请求失败: %s', action, e)
            return Err(f'Failed to {ACTION_LABELS[action]}. Please try again.')

        if not isinstance(data, dict):
            return Err(f'Failed to {ACTION_LABELS[action]}. Please try again.')
        if not data.get('success'):
            return Err(data.get('message') or f'Failed to {ACTION_LABELS[action]}.')

        if refresh:
            self.refresh_all()
        return Ok(data, data.get('message', ''))

    def _patch_cached_word(self, word_id, mutate):
        words, categories = self.load_cache()
        for word in words:
            if word.id == word_id:
                mutate(word)
        self.save_cache(words, categories)

    # --- 读 ---

    def get_words(self):
        try:
            data = self._fetch_list('getWords')
        except (requests.RequestException, ApiUnavailableError) as e:
            logger.warning('获取单词失败，使用本地缓存: %s', e)
            return self.load_cache()[0]
        words = normalize_words(data)
        _, categories = self.load_cache()
        self.save_cache(words, categories)
        return words

    def get_categories(self):
        try:
            data = self._fetch_list('getCategories')
        except (requests.RequestException, ApiUnavailableError) as e:
            logger.warning('获取分类失败，使用本地缓存: %s', e)
            return self.load_cache()[1]
        categories = normalize_categories(data)
        words, _ = self.load_cache()
        self.save_cache(words, categories)
        return categories

    # --- 写：单词 ---

    def add_word(self, text):
        result = self._write('addWord', {'text': text})
        if not result.ok:
            return result
        return Ok(Word.from_dict(result.value.get('word') or {}), result.message)

    def delete_word(self, word_id):
        return self._write('deleteWord', {'wordId': str(word_id)})

    def update_word_status(self, word_id, status_index, checked):
        result = self._write('updateWordStatus', {
            'wordId': str(word_id),
            'statusIndex': int(status_index),
            'checked': bool(checked),
        }, refresh=False)
        if result.ok:
            def mutate(word):
                word.statuses[status_index] = bool(checked)
            self._patch_cached_word(str(word_id), mutate)
        return result

    def update_word_text(self, word_id, new_text):
        return self._write('updateWordText', {'wordId': str(word_id), 'newText': new_text})

    def append_word_text(self, word_id, text_to_append):
        return self._write('appendWordText', {'wordId': str(word_id), 'textToAppend': text_to_append})

    def import_words(self, words, categories=None):
        params = {'words': [w.to_dict() if isinstance(w, Word) else w for w in words]}
        if categories:
            params['categories'] = [c.to_dict() if isinstance(c, Category) else c for c in categories]
        return self._write('importWords', params)

    def update_word_categories(self, word_id, category_ids):
        return self._write('updateWordCategories', {'wordId': str(word_id), 'categoryIds': list(category_ids)})

    def toggle_word_importance(self, word_id):
        result = self._write('toggleWordImportance', {'wordId': str(word_id)}, refresh=False)
        if result.ok:
            def mutate(word):
                word.is_important = not word.is_important
            self._patch_cached_word(str(word_id), mutate)
        return result

    def toggle_word_expression(self, word_id):
        return self._write('toggleWordExpression', {'wordId': str(word_id)})

    def increment_eye_click_count(self, word_id):
        return self._write('incrementEyeClickCount', {'wordId': str(word_id)})

    def add_confusing_word(self, word_id, confusing_word):
        return self._write('addConfusingWord', {'wordId': str(word_id), 'confusingWord': confusing_word})

    def remove_confusing_word(self, word_id, index):
        return self._write('removeConfusingWord', {'wordId': str(word_id), 'confusingWordIndex': int(index)})

    # --- 写：分类 ---

    def add_category(self, name, color):
        result = self._write('addCategory', {'name': name, 'color': color})
        if not result.ok:
            return result
        return Ok(Category.from_dict(result.value.get('category') or {}), result.message)

    def update_category(self, category_id, name, color):
        return self._write('updateCategory', {'id': str(category_id), 'name': name, 'color': color})

    def delete_category(self, category_id):
        return self._write('deleteCategory', {'id': str(category_id)})
