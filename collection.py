# collection.py
"""
单词列表的内存状态

负责过滤/排序视图、分页与打乱、以及所有乐观更新。修改先作用于本地列表，
再通过 VocabApiClient 提交；失败后按 MutationPolicy 决定保留本地状态还是
重新拉取服务器数据。is_saving 标志保证同一时间只有一个修改在进行。
"""
import logging
import random

from masking import SHOW_ALL, STUDY_MODES, RevealState, mask_tokens
from models import STATUS_COUNT, Category, Err, MutationPolicy
from pagination import (
    PAGE_SIZE,
    is_valid_page,
    page_window,
    shuffled_page_order,
    total_pages,
)
from stats import compute_statistics
from text_utils import contains_arabic
from transfer import ImportFormatError, dump_document, parse_document

logger = logging.getLogger(__name__)

ALL_CATEGORIES = 'all'

SUCCESS = 'success'
ERROR = 'error'

FLUENT_STATUS_INDEX = STATUS_COUNT - 1


def filter_words(words, search='', arabic_only=False, category_id=ALL_CATEGORIES,
                 important_only=False, sort_by_eye_clicks=False):
    """按固定顺序过滤：搜索 -> 阿拉伯文 -> 分类 -> 重要 -> 眼睛点击排序"""
    filtered = list(words)
    if search:
        term = search.lower()
        filtered = [w for w in filtered if term in w.text.lower()]
    if arabic_only:
        filtered = [w for w in filtered if contains_arabic(w.text)]
    if category_id != ALL_CATEGORIES:
        filtered = [w for w in filtered if category_id in w.category_ids]
    if important_only:
        filtered = [w for w in filtered if w.is_important]
    if sort_by_eye_clicks:
        # sorted 是稳定排序，点击数相同的保持原顺序
        filtered = sorted(filtered, key=lambda w: w.eye_click_count or 0, reverse=True)
    return filtered


class WordCollection:
    def __init__(self, api, notify=None, rng=None):
        self.api = api
        self._notify = notify
        self.rng = rng or random.Random()

        self.words = []
        self.categories = []
        self.filtered = []

        self.search = ''
        self.arabic_only = False
        self.category_filter = ALL_CATEGORIES
        self.important_only = False
        self.sort_by_eye_clicks = False

        self.current_page = 1
        self.is_shuffled = False
        self.pages_shuffled = False
        self.page_order = []

        self.study_mode = SHOW_ALL
        self._reveal_states = {}

        self.is_saving = False
        self.words_learned_today = 0

    # --- 通知 ---

    def _emit(self, level, message):
        if self._notify is not None:
            self._notify(level, message)
        elif level == ERROR:
            logger.warning(message)
        else:
            logger.info(message)

    # --- 视图 ---

    def _refresh_view(self, reset_page):
        self.filtered = filter_words(
            self.words,
            search=self.search,
            arabic_only=self.arabic_only,
            category_id=self.category_filter,
            important_only=self.important_only,
            sort_by_eye_clicks=self.sort_by_eye_clicks,
        )
        pages = self.total_pages
        if reset_page:
            self.current_page = 1
            self.pages_shuffled = False
            self.page_order = []
            return
        if self.pages_shuffled and len(self.page_order) != pages:
            self.page_order = shuffled_page_order(pages, self.rng)
        if self.current_page > max(pages, 1):
            self.current_page = max(pages, 1)

    @property
    def total_pages(self):
        return total_pages(len(self.filtered), PAGE_SIZE)

    def page_words(self):
        order = self.page_order if self.pages_shuffled else None
        return page_window(self.filtered, self.current_page, order, PAGE_SIZE)

    def go_to_page(self, page):
        if not is_valid_page(page, self.total_pages):
            return False
        self.current_page = int(page)
        return True

    def set_search(self, term):
        self.search = term or ''
        self._refresh_view(reset_page=True)

    def set_arabic_only(self, enabled):
        self.arabic_only = bool(enabled)
        self._refresh_view(reset_page=True)

    def set_category_filter(self, category_id):
        self.category_filter = category_id or ALL_CATEGORIES
        self._refresh_view(reset_page=True)

    def set_important_only(self, enabled):
        self.important_only = bool(enabled)
        self._refresh_view(reset_page=True)

    def toggle_eye_click_sort(self):
        self.sort_by_eye_clicks = not self.sort_by_eye_clicks
        self._refresh_view(reset_page=True)

    # --- 打乱 ---

    def shuffle(self):
        shuffled = list(self.words)
        self.rng.shuffle(shuffled)
        self.words = shuffled
        self.is_shuffled = True
        self._refresh_view(reset_page=True)

    def toggle_page_shuffle(self):
        self.current_page = 1
        if self.pages_shuffled:
            self.pages_shuffled = False
            self.page_order = []
            return
        self.pages_shuffled = True
        pages = self.total_pages
        self.page_order = shuffled_page_order(pages, self.rng) if pages > 0 else []

    def reset_order(self):
        """恢复服务器上的原始顺序，但保留本地的学习进度"""
        canonical = self.api.get_words()
        current = {w.id: w for w in self.words}
        restored = []
        for word in canonical:
            local = current.get(word.id)
            if local is not None:
                word = word.copy(
                    statuses=list(local.statuses),
                    category_ids=list(local.category_ids),
                    confusing_words=list(local.confusing_words),
                    is_important=local.is_important,
                    eye_click_count=local.eye_click_count,
                    is_expression=local.is_expression,
                )
            restored.append(word)
        self.words = restored
        self.is_shuffled = False
        self._refresh_view(reset_page=True)

    # --- 加载 / 导入导出 ---

    def load(self):
        self.words = self.api.get_words()
        self.categories = self.api.get_categories()
        self.is_shuffled = False
        self._refresh_view(reset_page=True)

    def export_data(self):
        return dump_document(self.words, self.categories)

    def import_data(self, raw):
        if self.is_saving:
            return Err('Another change is still being saved', blocked=True)
        try:
            words, categories = parse_document(raw)
        except ImportFormatError as e:
            self._emit(ERROR, f'Invalid JSON file. Please check the format and try again. ({e})')
            return Err(str(e))

        self.is_saving = True
        try:
            result = self.api.import_words(words, categories)
            if not result.ok:
                self._emit(ERROR, result.message)
                return result
            self.words = words
            if categories:
                self.categories = categories
            self.is_shuffled = False
            self._refresh_view(reset_page=True)
            self._emit(SUCCESS, 'Words imported successfully.')
            return result
        finally:
            self.is_saving = False

    # --- 显示/隐藏 ---

    def set_study_mode(self, mode):
        if mode not in STUDY_MODES:
            raise ValueError(f'Unknown study mode: {mode}')
        self.study_mode = mode
        for state in self._reveal_states.values():
            state.reset()

    def is_revealed(self, word_id):
        state = self._reveal_states.get(word_id)
        return state.revealed if state else False

    def render_word(self, word):
        return mask_tokens(word.text, self.study_mode, self.is_revealed(word.id), word.is_expression)

    def reveal(self, word_id):
        """
        切换某一行的显示状态。只有从隐藏变为显示时才增加 eyeClickCount，
        返回远程调用结果；隐藏时返回 None。
        """
        state = self._reveal_states.setdefault(word_id, RevealState())
        if not state.toggle():
            return None

        def bump(word):
            word.eye_click_count = (word.eye_click_count or 0) + 1

        result = self._mutate(
            MutationPolicy.DURABLE,
            self._map_word(word_id, bump),
            lambda: self.api.increment_eye_click_count(word_id),
        )
        if result.blocked:
            # 没有计数就不算显示过
            state.reset()
        return result

    # --- 修改 ---

    def word_by_id(self, word_id):
        for word in self.words:
            if word.id == word_id:
                return word
        return None

    def _map_word(self, word_id, mutate):
        def apply(words):
            updated = []
            for word in words:
                if word.id == word_id:
                    word = word.copy()
                    mutate(word)
                updated.append(word)
            return updated
        return apply

    def _mutate(self, policy, apply_local, remote, success_message=None):
        if self.is_saving:
            logger.debug('已有修改在保存中，忽略本次操作')
            return Err('Another change is still being saved', blocked=True)

        self.is_saving = True
        try:
            self.words = apply_local(self.words)
            self._refresh_view(reset_page=False)

            result = remote()
            if result.ok:
                if success_message:
                    self._emit(SUCCESS, success_message)
                return result

            self._emit(ERROR, result.message)
            if policy is MutationPolicy.RECONCILE:
                logger.warning('修改失败，重新拉取单词列表: %s', result.message)
                self.words = self.api.get_words()
                self._refresh_view(reset_page=False)
            return result
        finally:
            self.is_saving = False

    def update_status(self, word_id, status_index, checked):
        if not 0 <= status_index < STATUS_COUNT:
            raise ValueError(f'Invalid status index: {status_index}')

        def set_status(word):
            word.statuses[status_index] = bool(checked)

        result = self._mutate(
            MutationPolicy.DURABLE,
            self._map_word(word_id, set_status),
            lambda: self.api.update_word_status(word_id, status_index, checked),
        )
        if not result.blocked and status_index == FLUENT_STATUS_INDEX:
            if checked:
                self.words_learned_today += 1
            else:
                self.words_learned_today = max(0, self.words_learned_today - 1)
        return result

    def toggle_importance(self, word_id):
        def toggle(word):
            word.is_important = not word.is_important

        return self._mutate(
            MutationPolicy.DURABLE,
            self._map_word(word_id, toggle),
            lambda: self.api.toggle_word_importance(word_id),
            'Word importance updated.',
        )

    def toggle_expression(self, word_id):
        def toggle(word):
            word.is_expression = not word.is_expression

        return self._mutate(
            MutationPolicy.RECONCILE,
            self._map_word(word_id, toggle),
            lambda: self.api.toggle_word_expression(word_id),
            'Word expression status updated.',
        )

    def update_text(self, word_id, new_text):
        new_text = (new_text or '').strip()
        if not new_text:
            return Err('Word text cannot be empty')

        def set_text(word):
            word.text = new_text

        return self._mutate(
            MutationPolicy.RECONCILE,
            self._map_word(word_id, set_text),
            lambda: self.api.update_word_text(word_id, new_text),
        )

    def append_text(self, word_id, text_to_append):
        text_to_append = (text_to_append or '').strip()
        if not text_to_append:
            return Err('Text to append cannot be empty')

        def append(word):
            word.text = f'{word.text} -- {text_to_append}'

        return self._mutate(
            MutationPolicy.RECONCILE,
            self._map_word(word_id, append),
            lambda: self.api.append_word_text(word_id, text_to_append),
        )

    def update_categories(self, word_id, category_ids):
        # 去重但保留顺序
        ids = list(dict.fromkeys(str(c) for c in category_ids))

        def set_categories(word):
            word.category_ids = list(ids)

        return self._mutate(
            MutationPolicy.RECONCILE,
            self._map_word(word_id, set_categories),
            lambda: self.api.update_word_categories(word_id, ids),
            'Word categories updated.',
        )

    def add_confusing_word(self, word_id, confusing_word):
        confusing_word = (confusing_word or '').strip()
        if not confusing_word:
            return Err('Confusing word cannot be empty')

        def add(word):
            word.confusing_words.append(confusing_word)

        return self._mutate(
            MutationPolicy.RECONCILE,
            self._map_word(word_id, add),
            lambda: self.api.add_confusing_word(word_id, confusing_word),
            'Confusing word added.',
        )

    def remove_confusing_word(self, word_id, index):
        # TODO: 如果以后放开并发修改，改成按内容或稳定 id 删除，下标可能已经失效
        def remove(word):
            if 0 <= index < len(word.confusing_words):
                del word.confusing_words[index]

        return self._mutate(
            MutationPolicy.RECONCILE,
            self._map_word(word_id, remove),
            lambda: self.api.remove_confusing_word(word_id, index),
            'Confusing word removed.',
        )

    def delete_word(self, word_id):
        result = self._mutate(
            MutationPolicy.RECONCILE,
            lambda words: [w for w in words if w.id != word_id],
            lambda: self.api.delete_word(word_id),
            'Word deleted successfully.',
        )
        if result.ok:
            self._reveal_states.pop(word_id, None)
        return result

    def add_word(self, text):
        text = (text or '').strip()
        if not text:
            return Err('Word text cannot be empty')
        if self.is_saving:
            return Err('Another change is still being saved', blocked=True)

        self.is_saving = True
        try:
            result = self.api.add_word(text)
            if not result.ok:
                self._emit(ERROR, result.message)
                return result
            self.words = self.words + [result.value]
            self._refresh_view(reset_page=False)
            self._emit(SUCCESS, 'New word added successfully.')
            return result
        finally:
            self.is_saving = False

    # --- 分类 ---

    def _category_call(self, remote, on_success, success_message):
        if self.is_saving:
            return Err('Another change is still being saved', blocked=True)
        self.is_saving = True
        try:
            result = remote()
            if not result.ok:
                self._emit(ERROR, result.message)
                return result
            on_success(result)
            self._emit(SUCCESS, success_message)
            return result
        finally:
            self.is_saving = False

    def add_category(self, name, color='#000000'):
        name = (name or '').strip()
        if not name:
            return Err('Category name cannot be empty')

        def on_success(result):
            self.categories = self.categories + [result.value]

        return self._category_call(lambda: self.api.add_category(name, color), on_success, 'Category added.')

    def update_category(self, category_id, name, color):
        name = (name or '').strip()
        if not name:
            return Err('Category name cannot be empty')

        def on_success(result):
            self.categories = [
                Category(id=c.id, name=name, color=color) if c.id == category_id else c
                for c in self.categories
            ]

        return self._category_call(
            lambda: self.api.update_category(category_id, name, color), on_success, 'Category updated.')

    def delete_category(self, category_id):
        def on_success(result):
            self.categories = [c for c in self.categories if c.id != category_id]
            updated = []
            for word in self.words:
                if category_id in word.category_ids:
                    word = word.copy(category_ids=[c for c in word.category_ids if c != category_id])
                updated.append(word)
            self.words = updated
            if self.category_filter == category_id:
                self.category_filter = ALL_CATEGORIES
                self._refresh_view(reset_page=True)
            else:
                self._refresh_view(reset_page=False)

        return self._category_call(lambda: self.api.delete_category(category_id), on_success, 'Category deleted.')

    def statistics(self):
        return compute_statistics(self.words)
