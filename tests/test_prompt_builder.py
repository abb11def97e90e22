from models import ArticleContent
from prompt_builder import MAX_ARTICLE_CHARS, build_prompt


def test_prompt_embeds_article_fields(article):
    prompt = build_prompt(article)
    assert "Article Title: Alan Turing" in prompt
    assert "Description: English computer scientist (1912–1954)" in prompt
    assert article.extract in prompt


def test_prompt_describes_schema(article):
    prompt = build_prompt(article)
    for key in ("title", "summary", "key_entities", "people", "organizations",
                "locations", "sections", "quiz", "related_topics"):
        assert f'"{key}"' in prompt
    assert "5-10" in prompt
    assert "Return ONLY valid JSON" in prompt


def test_prompt_truncates_long_extracts():
    extract = "a" * MAX_ARTICLE_CHARS + "b" * 500
    prompt = build_prompt(ArticleContent(title="T", extract=extract))
    assert "a" * MAX_ARTICLE_CHARS in prompt
    assert "b" not in prompt.split("Content: ", 1)[1].split("\n", 1)[0]


def test_prompt_is_deterministic(article):
    assert build_prompt(article) == build_prompt(article)


def test_braces_in_article_text_are_kept():
    prompt = build_prompt(ArticleContent(title="Set {x}", extract="The set {1, 2} has two members." * 3))
    assert "Article Title: Set {x}" in prompt
    assert "The set {1, 2} has two members." in prompt
