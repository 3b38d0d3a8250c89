"""Tests for WordPress post conversion."""

from datetime import datetime, timedelta, timezone

from cms.convert import clean_content, convert_post, fix_image_url, format_relative_date
from config import DEFAULT_IMAGE, WORDPRESS_IMAGE_HOST

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _post(**overrides):
    post = {
        "id": 991,
        "slug": "drake-drops-new-single",
        "date": "2024-06-15T07:00:00",
        "date_gmt": "2024-06-15T11:00:00",
        "title": {"rendered": "Drake &#8216;Drops&#8217; <em>New</em> Single"},
        "content": {"rendered": "<p class=\"wp-block\">Hello</p>"},
        "excerpt": {"rendered": "<p>Short &amp; sweet</p>"},
        "categories": [3],
        "tags": [1, 2],
        "_embedded": {
            "wp:featuredmedia": [{"source_url": "https://donaldbriggs.com/wp-content/uploads/cover.jpg"}],
            "wp:term": [
                [{"id": 3, "name": "Hip Hop", "slug": "hip-hop"}],
                [{"id": 1, "name": "Drake", "slug": "drake", "count": 4}],
            ],
        },
    }
    post.update(overrides)
    return post


def test_convert_post_fields():
    article = convert_post(_post(), now=NOW)
    assert article.id == "drake-drops-new-single"
    assert article.slug == article.id
    assert article.title == "Drake ‘Drops’ New Single"
    assert article.category == "HIP HOP"
    assert article.author == "Rap News"
    assert article.excerpt == "Short & sweet"
    assert article.raw_date == "2024-06-15T11:00:00Z"
    assert article.date == "1 hour ago"
    assert article.comments == 0
    assert article.tags == (1, 2)
    assert article.image == f"{WORDPRESS_IMAGE_HOST}/wp-content/uploads/cover.jpg"


def test_convert_post_defaults():
    article = convert_post(_post(categories=[], _embedded={}), now=NOW)
    assert article.category == "NEWS"
    assert article.image == DEFAULT_IMAGE


def test_explicit_image_overrides_embedded():
    article = convert_post(_post(), image_url="https://cdn.example.com/x.jpg", now=NOW)
    assert article.image == "https://cdn.example.com/x.jpg"


def test_serialized_keys_are_camel_case():
    data = convert_post(_post(), now=NOW).to_dict()
    assert data["rawDate"] == "2024-06-15T11:00:00Z"
    assert "raw_date" not in data


def test_relative_dates():
    assert format_relative_date(NOW - timedelta(minutes=5), NOW) == "5 minutes ago"
    assert format_relative_date(NOW - timedelta(hours=1), NOW) == "1 hour ago"
    assert format_relative_date(NOW - timedelta(hours=5), NOW) == "5 hours ago"
    assert format_relative_date(NOW - timedelta(days=1), NOW) == "1 day ago"
    assert format_relative_date(NOW - timedelta(days=3), NOW) == "3 days ago"
    assert format_relative_date(datetime(2024, 1, 3, tzinfo=timezone.utc), NOW) == "Jan 3, 2024"


def test_future_dates_use_absolute_difference():
    assert format_relative_date(NOW + timedelta(hours=2), NOW) == "2 hours ago"


def test_clean_content_removes_images():
    html = (
        "<figure><img src=\"a.jpg\"/><figcaption>cap</figcaption></figure>"
        "<p>Text <img src=\"b.jpg\"/>here</p>"
        "<picture><source srcset=\"c.webp\"/></picture>"
    )
    cleaned = clean_content(html)
    assert "<img" not in cleaned
    assert "<figure" not in cleaned
    assert "<picture" not in cleaned
    assert "Text here" in cleaned


def test_clean_content_strips_class_and_style():
    cleaned = clean_content("<p class=\"x\" style=\"color:red\" id=\"keep\">Hi</p>")
    assert cleaned == "<p id=\"keep\">Hi</p>"


def test_clean_content_removes_brand_and_empty_paragraphs():
    cleaned = clean_content("<p>RapNews</p><p>Via Rap News: Drake wins</p><p></p>")
    assert cleaned == "<p>Via : Drake wins</p>"


def test_clean_content_keeps_embeds():
    html = "<p><iframe src=\"https://embed.example.com/1\"></iframe></p>"
    assert "<iframe" in clean_content(html)


def test_fix_image_url():
    assert fix_image_url("http://donaldbriggs.com/a.png") == f"{WORDPRESS_IMAGE_HOST}/a.png"
    assert fix_image_url("https://other.com/a.png") == "https://other.com/a.png"
    assert fix_image_url(None) == ""
