import pytest

from conftest import rhyme_page
from rifme import ParseError, extract_rhymes, parse_document


def test_extracts_words_in_document_order():
    soup = parse_document(rhyme_page("а", "б", "в"))
    assert extract_rhymes(soup) == ["а", "б", "в"]


def test_no_matches_yields_empty_list():
    soup = parse_document("<html><body><p>Ничего не найдено</p></body></html>")
    assert extract_rhymes(soup) == []


def test_ignores_items_with_other_classes():
    html = """
    <ul>
      <li class="riLi" data-w="кот">кот</li>
      <li class="menu" data-w="меню">меню</li>
      <li data-w="без">без</li>
      <li class="riLi" data-w="рот">рот</li>
    </ul>
    """
    assert extract_rhymes(parse_document(html)) == ["кот", "рот"]


def test_missing_attribute_fails_whole_extraction():
    html = """
    <ul>
      <li class="riLi" data-w="кот">кот</li>
      <li class="riLi">сломано</li>
      <li class="riLi" data-w="рот">рот</li>
    </ul>
    """
    with pytest.raises(ParseError):
        extract_rhymes(parse_document(html))
