"""menu_voting.menu 테스트"""
import pytest

from menu_voting.menu import extract_quota, parse_menu_data
from menu_voting.errors import InvalidRequest


@pytest.mark.unit
class TestExtractQuota:
    """쿼터 추출 테스트"""

    @pytest.mark.parametrize("value,expected", [
        (3, 3),
        ("2", 2),
        ("최대 2개 선택", 2),
        ("Select 4", 4),
        (None, 1),
        ("", 1),
        ("아무거나", 1),
        (2.0, 2),
        ("-3", -3),
        ("쿼터 -1개", -1),
    ])
    def test_extract_quota(self, value, expected):
        assert extract_quota(value) == expected


@pytest.mark.unit
class TestParseMenuData:
    """메뉴 데이터 정규화 테스트"""

    def test_parse_sample(self, sample_menu_raw):
        menu = parse_menu_data(sample_menu_raw)

        assert list(menu) == ["점심", "저녁"]
        main = menu["점심"][0]
        assert main.name == "메인" and main.quota == 2
        assert main.items == ["김치찌개", "된장찌개", "불고기"]

    def test_names_trimmed(self):
        menu = parse_menu_data({" 점심 ": [{"category": " 메인 ", "items": [" 불고기 "]}]})
        category = menu["점심"][0]
        assert category.name == "메인"
        assert category.quota == 1
        assert category.items == ["불고기"]

    def test_empty_menu(self):
        assert parse_menu_data({}) == {}

    def test_not_a_mapping(self):
        with pytest.raises(InvalidRequest):
            parse_menu_data(["점심"])

    def test_collects_all_problems(self):
        """모든 문제를 한 번에 보고"""
        with pytest.raises(InvalidRequest) as exc_info:
            parse_menu_data({
                "점심": [
                    {"category": "", "items": ["불고기"]},
                    {"category": "메인", "quota": 0, "items": ["불고기", "불고기", " "]},
                    {"category": "메인", "items": ["김치찌개"]},
                ],
                "저녁": "짜장면",
            })

        details = exc_info.value.details
        assert len(details) == 6
        assert any("카테고리 이름이 비어" in d for d in details)
        assert any("쿼터" in d for d in details)
        assert any("'불고기' 메뉴가 중복" in d for d in details)
        assert any("빈 메뉴 이름" in d for d in details)
        assert any("'메인' 카테고리가 중복" in d for d in details)
        assert any("[저녁]" in d for d in details)

    @pytest.mark.parametrize("items", [[], None, [" ", ""]])
    def test_category_without_items_rejected(self, items):
        """메뉴가 하나도 없는 카테고리는 거부"""
        raw_category = {"category": "메인", "quota": 1}
        if items is not None:
            raw_category["items"] = items

        with pytest.raises(InvalidRequest) as exc_info:
            parse_menu_data({"점심": [raw_category, {"category": "음료", "items": ["콜라"]}]})

        assert any("'메인' 카테고리에 메뉴가 없습니다" in d for d in exc_info.value.details)

    def test_items_must_be_a_list(self):
        """문자열 메뉴 목록을 글자 단위로 쪼개지 않음"""
        with pytest.raises(InvalidRequest) as exc_info:
            parse_menu_data({"점심": [{"category": "메인", "items": "불고기"}]})

        assert exc_info.value.details == ["[점심] '메인' 카테고리의 메뉴 목록이 배열이 아닙니다."]

    def test_negative_quota_rejected(self):
        with pytest.raises(InvalidRequest) as exc_info:
            parse_menu_data({"점심": [{"category": "메인", "quota": "-3", "items": ["불고기"]}]})

        assert any("쿼터는 1 이상" in d for d in exc_info.value.details)
