# config.py
import os

class Config:
    # 存储服务的数据目录，words.json / categories.json 放在这里
    DATA_DIR = os.getenv('VOCAB_DATA_DIR', os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data'))
    WORDS_FILE = 'words.json'
    CATEGORIES_FILE = 'categories.json'

    # 可选的 Basic Auth，不配置用户名则不校验
    API_USER = os.getenv('VOCAB_API_USER', '')
    API_PASSWORD = os.getenv('VOCAB_API_PASSWORD', '')

    # 客户端配置
    API_URL = os.getenv('VOCAB_API_URL', 'http://127.0.0.1:5000/api/words')
    # 默认不设超时，设置环境变量后单位为秒
    API_TIMEOUT = float(os.getenv('VOCAB_API_TIMEOUT')) if os.getenv('VOCAB_API_TIMEOUT') else None
    CACHE_FILE = os.getenv('VOCAB_CACHE_FILE', os.path.join(os.path.expanduser('~'), '.vocab_tracker_cache.json'))
    WORDS_CACHE_KEY = 'arabic_words_data_cache'
    CATEGORIES_CACHE_KEY = 'arabic_categories_data_cache'

    EXPORT_FILE_NAME = 'arabic-words-and-categories.json'
