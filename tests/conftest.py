"""
tests/conftest.py
公共 fixture：临时数据目录、Flask 测试客户端、内存版的存储访问层
"""
import json
import os

import pytest

# ========== 关键：在导入app之前设置环境变量 ==========
os.environ['TESTING'] = 'true'
os.environ.pop('VOCAB_API_USER', None)

# ========== 导入app ==========
from app import app
from models import Category, Err, Ok, Word


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / 'data'
    path.mkdir()
    return path


@pytest.fixture
def test_client(data_dir):
    """
    测试客户端fixture - 每个测试函数一个干净的数据目录
    """
    original = {key: app.config.get(key) for key in ('DATA_DIR', 'API_USER', 'API_PASSWORD')}
    app.config.update({
        'TESTING': True,
        'DATA_DIR': str(data_dir),
        'API_USER': '',
        'API_PASSWORD': '',
    })
    with app.test_client() as client:
        yield client
    app.config.update(original)


@pytest.fixture
def seed_store(data_dir):
    """直接写入 words.json / categories.json"""
    def seed(words=None, categories=None):
        if words is not None:
            (data_dir / 'words.json').write_text(json.dumps(words, ensure_ascii=False), encoding='utf-8')
        if categories is not None:
            (data_dir / 'categories.json').write_text(json.dumps(categories, ensure_ascii=False), encoding='utf-8')
    return seed


@pytest.fixture
def read_store(data_dir):
    def read(name):
        path = data_dir / name
        if not path.exists():
            return []
        return json.loads(path.read_text(encoding='utf-8'))
    return read


@pytest.fixture
def sample_words():
    """
    预置测试单词数据
    """
    return [
        Word(id='1', text='مرحبا -- hello', statuses=[True, False, False, False], category_ids=['c1']),
        Word(id='2', text='بيت house', statuses=[True, True, True, False], is_important=True),
        Word(id='3', text='just english', category_ids=['c1', 'c2']),
        Word(id='4', text='كتاب -- book', eye_click_count=5, category_ids=['c2']),
        Word(id='5', text='قلم pen', statuses=[True, True, True, True], eye_click_count=2, is_important=True),
    ]


@pytest.fixture
def sample_categories():
    return [Category(id='c1', name='Greetings', color='#10b981'), Category(id='c2', name='Home', color='#3b82f6')]


class FakeApi:
    """
    内存版 VocabApiClient，记录每次调用，
    把操作名放进 fail 集合就会返回 Err
    """

    def __init__(self, words=None, categories=None):
        self.canonical_words = [w.copy() for w in (words or [])]
        self.canonical_categories = list(categories or [])
        self.calls = []
        self.fail = set()
        self.next_id = 100

    def _result(self, name, *args, value=None):
        self.calls.append((name,) + args)
        if name in self.fail:
            return Err(f'{name} failed')
        return Ok(value, 'ok')

    def get_words(self):
        self.calls.append(('get_words',))
        return [w.copy() for w in self.canonical_words]

    def get_categories(self):
        self.calls.append(('get_categories',))
        return list(self.canonical_categories)

    def add_word(self, text):
        self.next_id += 1
        return self._result('add_word', text, value=Word(id=str(self.next_id), text=text))

    def add_category(self, name, color):
        self.next_id += 1
        return self._result('add_category', name, color, value=Category(id=str(self.next_id), name=name, color=color))

    def __getattr__(self, name):
        # 其余写操作统一记录并返回 Ok / Err
        def call(*args):
            return self._result(name, *args)
        return call

    def called(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def api_factory():
    """按需构造 FakeApi"""
    return FakeApi


@pytest.fixture
def fake_api(sample_words, sample_categories):
    return FakeApi(sample_words, sample_categories)


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def collection(fake_api, notifications):
    import random
    from collection import WordCollection

    coll = WordCollection(fake_api, notify=lambda level, message: notifications.append((level, message)),
                          rng=random.Random(42))
    coll.load()
    return coll


@pytest.fixture
def make_words():
    """生成 count 个含阿拉伯文的单词，id 从 1 开始"""
    def make(count, prefix="كلمة"):
        return [Word(id=str(i), text=f"{prefix} word{i}") for i in range(1, count + 1)]
    return make


# ========== 注册pytest标记 ==========

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: 标记为单元测试")
    config.addinivalue_line("markers", "integration: 标记为集成测试")
    config.addinivalue_line("markers", "e2e: 标记为端到端测试")
