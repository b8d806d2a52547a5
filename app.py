# app.py
from flask import Flask, request, jsonify, Response
from config import Config
from store import JsonStore, StoreError
from transfer import ImportFormatError, dump_document, parse_document
from models import normalize_categories, normalize_words
import os
import sys

# 判断是否在测试环境中
TESTING = 'pytest' in sys.modules or os.getenv('TESTING') == 'true'

app = Flask(__name__)
app.config.from_object(Config)
if TESTING:
    app.config['TESTING'] = True


def get_store():
    return JsonStore(app.config['DATA_DIR'], app.config['WORDS_FILE'], app.config['CATEGORIES_FILE'])


def _unauthorized():
    resp = jsonify({'success': False, 'message': 'Authentication required'})
    resp.status_code = 401
    resp.headers['WWW-Authenticate'] = 'Basic realm="Restricted Area"'
    return resp


@app.before_request
def check_auth():
    user = app.config.get('API_USER')
    if not user:
        return None
    auth = request.authorization
    if not auth or auth.username != user or auth.password != app.config.get('API_PASSWORD'):
        return _unauthorized()
    return None


def _read_payload():
    """
    读取请求参数：GET 用查询参数，POST 优先 JSON，其次表单。
    返回 (action, params)，无法解析时返回 (None, None)
    """
    if request.method == 'GET':
        params = request.args.to_dict()
        return params.get('action'), params

    payload = request.get_json(silent=True)
    if payload is None and request.form:
        payload = request.form.to_dict()
        if 'action' not in payload and request.args.get('action'):
            payload['action'] = request.args['action']
    if payload is None:
        return None, None

    # 兼容旧格式：[wordId, statusIndex, checked]
    if isinstance(payload, list) and len(payload) == 3:
        word_id, status_index, checked = payload
        return 'updateWordStatus', {'wordId': word_id, 'statusIndex': status_index, 'checked': checked}

    if not isinstance(payload, dict):
        return None, None
    return payload.get('action') or request.args.get('action'), payload


# --- API 接口 ---

@app.route('/api/words', methods=['GET', 'POST'])
def words_api():
    action, params = _read_payload()
    if params is None:
        return jsonify({'success': False, 'message': 'Invalid JSON'}), 400
    if not action:
        return jsonify({'success': False, 'message': 'Missing action'}), 400
    if request.method == 'GET' and action not in ('getWords', 'getCategories'):
        return jsonify({'success': False, 'message': 'Unknown action'}), 400

    try:
        result = get_store().dispatch(action, params)
    except StoreError as e:
        app.logger.warning('存储操作失败 action=%s: %s', action, e.message)
        return jsonify({'success': False, 'message': e.message}), e.status

    return jsonify(result)


@app.route('/api/export', methods=['GET'])
def export_data():
    store = get_store()
    body = dump_document(normalize_words(store.get_words()), normalize_categories(store.get_categories()))
    return Response(
        body,
        mimetype='application/json',
        headers={'Content-Disposition': f'attachment; filename={app.config["EXPORT_FILE_NAME"]}'},
    )


@app.route('/api/import', methods=['POST'])
def import_data():
    if 'file' not in request.files:
        return jsonify({'success': False, 'message': 'No file part'}), 400
    raw_data = request.files['file'].read()

    try:
        words, categories = parse_document(raw_data)
    except ImportFormatError as e:
        return jsonify({'success': False, 'message': str(e)}), 400

    store = get_store()
    try:
        store.save_words([w.to_dict() for w in words])
        if categories:
            store.save_categories([c.to_dict() for c in categories])
    except StoreError as e:
        return jsonify({'success': False, 'message': e.message}), e.status

    return jsonify({
        'success': True,
        'message': f'Imported {len(words)} words and {len(categories)} categories.',
        'words': len(words),
        'categories': len(categories),
    })


if __name__ == '__main__':
    os.makedirs(app.config['DATA_DIR'], exist_ok=True)
    app.run(host='0.0.0.0', port=5000, debug=True)
