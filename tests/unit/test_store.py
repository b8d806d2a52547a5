import json

import pytest
import allure

from store import JsonStore, NotFoundError, StoreError

pytestmark = pytest.mark.unit


@pytest.fixture
def store(data_dir):
    return JsonStore(str(data_dir))


@pytest.fixture
def seeded(store, seed_store):
    seed_store(
        words=[
            {"id": "2", "text": "بيت house", "statuses": [False] * 4, "categoryIds": ["1", "2"],
             "confusingWords": ["بنت"], "isImportant": False, "eyeClickCount": 0},
            {"id": "10", "text": "قلم pen", "statuses": [True, False, False, False], "categoryIds": ["2"]},
        ],
        categories=[{"id": "1", "name": "Home", "color": "#fff"}, {"id": "2", "name": "School", "color": "#000"}],
    )
    return store


@allure.epic("存储层单元测试")
@allure.feature("文件读写")
class TestFiles:

    @allure.title("文件不存在或损坏时返回空列表")
    def test_missing_and_corrupt_files(self, store, data_dir):
        assert store.get_words() == []
        (data_dir / "words.json").write_text("{broken", encoding="utf-8")
        assert store.get_words() == []
        (data_dir / "categories.json").write_text('{"not": "a list"}', encoding="utf-8")
        assert store.get_categories() == []

    @allure.title("保存时按数字 id 排序并保留阿拉伯文")
    def test_save_sorts_by_numeric_id(self, store, data_dir):
        store.save_words([{"id": "10", "text": "b"}, {"id": "9", "text": "ماء"}, {"id": "1", "text": "a"}])
        raw = (data_dir / "words.json").read_text(encoding="utf-8")
        assert "ماء" in raw
        assert [w["id"] for w in json.loads(raw)] == ["1", "9", "10"]


@allure.epic("存储层单元测试")
@allure.feature("单词操作")
class TestWordActions:

    @allure.title("新增单词：id 取最大值加一，字段齐全")
    def test_add_word(self, seeded):
        result = seeded.dispatch("addWord", {"text": "شمس sun"})
        assert result["success"] is True
        assert result["word"] == {
            "id": "11", "text": "شمس sun", "statuses": [False] * 4, "categoryIds": [],
            "confusingWords": [], "isImportant": False, "isExpression": False, "eyeClickCount": 0,
        }
        assert [w["id"] for w in seeded.get_words()] == ["2", "10", "11"]

    @allure.title("空存储的第一个单词 id 为 1")
    def test_first_id(self, store):
        assert store.dispatch("addWord", {"text": "x"})["word"]["id"] == "1"

    @allure.title("缺少参数")
    @pytest.mark.parametrize("action, params, message", [
        ("addWord", {}, "Missing text parameter"),
        ("deleteWord", {}, "Missing wordId parameter"),
        ("updateWordStatus", {"wordId": "2", "statusIndex": 0}, "Missing parameters"),
        ("updateWordText", {"wordId": "2"}, "Missing parameters"),
        ("appendWordText", {"textToAppend": "x"}, "Missing parameters"),
        ("updateWordCategories", {"wordId": "2", "categoryIds": "nope"}, "Missing wordId or invalid categoryIds parameter"),
        ("importWords", {"words": {"a": 1}}, "Invalid words array"),
        ("addCategory", {"name": "x"}, "Missing name or color parameter for addCategory"),
        ("updateCategory", {"id": "1", "name": "x"}, "Missing parameters for updateCategory"),
        ("deleteCategory", {}, "Missing id parameter for deleteCategory"),
    ])
    def test_missing_parameters(self, seeded, action, params, message):
        with pytest.raises(StoreError) as exc:
            seeded.dispatch(action, params)
        assert exc.value.message == message
        assert exc.value.status == 400

    @allure.title("未知操作")
    def test_unknown_action(self, store):
        with pytest.raises(StoreError, match="Unknown action"):
            store.dispatch("dropTables", {})

    @allure.title("找不到单词返回 200 状态码的错误")
    def test_word_not_found(self, seeded):
        with pytest.raises(NotFoundError) as exc:
            seeded.dispatch("toggleWordImportance", {"wordId": "99"})
        assert exc.value.status == 200
        assert exc.value.message == "Word with ID 99 not found"

    @allure.title("更新状态，兼容字符串布尔值")
    def test_update_status(self, seeded):
        seeded.dispatch("updateWordStatus", {"wordId": "2", "statusIndex": "1", "checked": "true"})
        seeded.dispatch("updateWordStatus", {"wordId": 10, "statusIndex": 0, "checked": False})
        words = {w["id"]: w for w in seeded.get_words()}
        assert words["2"]["statuses"] == [False, True, False, False]
        assert words["10"]["statuses"] == [False] * 4

    @allure.title("状态下标越界")
    def test_update_status_bad_index(self, seeded):
        with pytest.raises(StoreError, match="Invalid status index"):
            seeded.dispatch("updateWordStatus", {"wordId": "2", "statusIndex": 4, "checked": True})

    @allure.title("修改和追加文本")
    def test_text_updates(self, seeded):
        seeded.dispatch("updateWordText", {"wordId": "2", "newText": "دار home"})
        seeded.dispatch("appendWordText", {"wordId": "2", "textToAppend": "house"})
        assert seeded.get_words()[0]["text"] == "دار home -- house"

    @allure.title("切换标记和累加眼睛点击数")
    def test_toggles_and_counter(self, seeded):
        seeded.dispatch("toggleWordImportance", {"wordId": "10"})
        seeded.dispatch("toggleWordExpression", {"wordId": "10"})
        seeded.dispatch("incrementEyeClickCount", {"wordId": "10"})
        seeded.dispatch("incrementEyeClickCount", {"wordId": "10"})
        word = seeded.get_words()[1]
        assert word["isImportant"] is True
        assert word["isExpression"] is True
        assert word["eyeClickCount"] == 2

    @allure.title("混淆词按下标删除")
    def test_confusing_words(self, seeded):
        seeded.dispatch("addConfusingWord", {"wordId": "2", "confusingWord": "بيض"})
        assert seeded.get_words()[0]["confusingWords"] == ["بنت", "بيض"]
        seeded.dispatch("removeConfusingWord", {"wordId": "2", "confusingWordIndex": 0})
        assert seeded.get_words()[0]["confusingWords"] == ["بيض"]
        with pytest.raises(StoreError, match="Invalid confusing word index"):
            seeded.dispatch("removeConfusingWord", {"wordId": "2", "confusingWordIndex": 5})

    @allure.title("更新单词分类，支持 JSON 字符串")
    def test_update_categories(self, seeded):
        seeded.dispatch("updateWordCategories", {"wordId": "10", "categoryIds": '["1", 2]'})
        assert seeded.get_words()[1]["categoryIds"] == ["1", "2"]

    @allure.title("删除单词")
    def test_delete_word(self, seeded):
        seeded.dispatch("deleteWord", {"wordId": "2"})
        assert [w["id"] for w in seeded.get_words()] == ["10"]
        with pytest.raises(NotFoundError):
            seeded.dispatch("deleteWord", {"wordId": "2"})

    @allure.title("导入替换全部单词，可同时导入分类")
    def test_import_words(self, seeded):
        seeded.dispatch("importWords", {"words": '[{"id": "5", "text": "x"}]'})
        assert seeded.get_words() == [{"id": "5", "text": "x"}]
        assert len(seeded.get_categories()) == 2

        seeded.dispatch("importWords", {"words": [], "categories": [{"id": "7", "name": "n", "color": "#111"}]})
        assert seeded.get_words() == []
        assert seeded.get_categories() == [{"id": "7", "name": "n", "color": "#111"}]


@allure.epic("存储层单元测试")
@allure.feature("分类操作")
class TestCategoryActions:

    @allure.title("新增和修改分类")
    def test_add_and_update(self, seeded):
        added = seeded.dispatch("addCategory", {"name": "Food", "color": "#f00"})["category"]
        assert added == {"id": "3", "name": "Food", "color": "#f00"}
        seeded.dispatch("updateCategory", {"id": "3", "name": "Meals", "color": "#0f0"})
        assert seeded.get_categories()[-1] == {"id": "3", "name": "Meals", "color": "#0f0"}

    @allure.title("修改不存在的分类")
    def test_update_missing_category(self, seeded):
        with pytest.raises(NotFoundError, match="Category with ID 9 not found"):
            seeded.dispatch("updateCategory", {"id": "9", "name": "x", "color": "#000"})

    @allure.title("删除分类时从所有单词中移除")
    def test_delete_category_cascades(self, seeded):
        seeded.dispatch("deleteCategory", {"id": "2"})
        assert [c["id"] for c in seeded.get_categories()] == ["1"]
        assert [w["categoryIds"] for w in seeded.get_words()] == [["1"], []]
