import pytest

from card_paginator.config.settings import Settings
from card_paginator.core.paginator import Paginator, pagination_stats, template_for
from card_paginator.core.segmenter import paragraphize
from card_paginator.models.dtos import Comment, CommentsPage, MainPage, Post


def make_post(**overrides):
    data = {
        "id": "abc123",
        "title": "What is the best advice you ever got?",
        "title_zh": "你得到过的最好建议是什么？",
        "subreddit": "AskReddit",
        "ups": 1234,
        "created": 1700000000,
        "selftext": "",
        "selftext_zh": "",
        "commentList": [],
    }
    data.update(overrides)
    return Post(**data)


def paragraph_table_height(table):
    """Main-page height looked up by the number of paragraphs on the page."""
    def _height(template_name, data, selector):
        if "comments" in data:
            return 100 * len(data["comments"])
        content = data.get("content") or data.get("content_zh") or ""
        return table[len(content.split("\n"))]
    return _height


@pytest.mark.asyncio
async def test_empty_post_yields_one_default_main_page(make_oracle, test_settings, events):
    oracle, renderer, _ = make_oracle()
    post = make_post()

    pages = await Paginator(oracle, settings=test_settings, events=events).paginate(post)

    assert pages == [
        MainPage(type="main", title=post.title, title_zh=post.title_zh, ups=1234, subreddit="AskReddit")
    ]
    assert not pages[0].has_content
    assert renderer.calls == []
    assert "default_page_emitted" in events.names()


@pytest.mark.asyncio
async def test_worked_example_one_paragraph_per_page(make_oracle, test_settings):
    oracle, _, _ = make_oracle(paragraph_table_height({1: 400, 2: 850, 3: 1300}))
    post = make_post(selftext="A\nB\nC", selftext_zh="甲\n乙\n丙")

    pages = await Paginator(oracle, settings=test_settings).paginate(post)

    assert [p.type for p in pages] == ["main", "main_continued", "main_continued"]
    assert [p.content for p in pages] == ["A", "B", "C"]
    assert [p.content_zh for p in pages] == ["甲", "乙", "丙"]
    assert all(p.title_zh == post.title_zh and p.subreddit == "AskReddit" for p in pages)


@pytest.mark.asyncio
async def test_main_content_reconstructs_both_tracks(make_oracle, test_settings):
    selftext = "\n".join(f"Paragraph {i} " + "lorem ipsum dolor sit amet " * (i % 5 + 1) for i in range(14))
    selftext_zh = "\n".join(f"第{i}段" + "这是一些中文内容" * (i % 4 + 1) for i in range(11))
    oracle, _, _ = make_oracle()
    post = make_post(selftext=selftext, selftext_zh=selftext_zh)

    pages = await Paginator(oracle, settings=test_settings).paginate(post)

    assert len(pages) > 1
    assert pages[0].type == "main"
    assert all(p.type == "main_continued" for p in pages[1:])
    assert "\n".join(p.content for p in pages if p.content) == "\n".join(paragraphize(selftext))
    assert "\n".join(p.content_zh for p in pages if p.content_zh) == "\n".join(paragraphize(selftext_zh))


@pytest.mark.asyncio
async def test_title_falls_back_to_polished_title(make_oracle, test_settings):
    oracle, _, _ = make_oracle()
    post = make_post(title_zh="", title_polish_zh="润色标题", selftext="Body")

    pages = await Paginator(oracle, settings=test_settings).paginate(post)

    assert pages[0].title_zh == "润色标题"


@pytest.mark.asyncio
async def test_comments_are_filtered_sorted_and_capped(make_oracle, test_settings):
    comments = [{"author": f"user{i}", "body": f"comment {i}", "body_zh": f"评论{i}", "ups": i} for i in range(15)]
    comments.append({"author": "blank", "body": "   ", "ups": 999})
    oracle, _, _ = make_oracle()
    post = make_post(commentList=comments)

    pages = await Paginator(oracle, settings=test_settings).paginate(post)

    assert all(isinstance(p, CommentsPage) for p in pages)
    shown = [c.author for p in pages for c in p.comments]
    assert shown == [f"user{i}" for i in range(14, 2, -1)]
    assert all(len(p.comments) <= 3 for p in pages)
    assert all(p.title == post.title_zh for p in pages)


@pytest.mark.asyncio
async def test_comments_page_title_falls_back_to_english_title(make_oracle, test_settings):
    oracle, _, _ = make_oracle()
    post = make_post(title_zh=None, commentList=[{"author": "a", "body": "hi", "ups": 1}])

    pages = await Paginator(oracle, settings=test_settings).paginate(post)

    assert pages[0].title == post.title


@pytest.mark.asyncio
async def test_main_pages_come_before_comment_pages(make_oracle, test_settings):
    oracle, _, _ = make_oracle()
    post = make_post(selftext="Body text", commentList=[{"author": "a", "body": "hi", "ups": 1}])

    pages = await Paginator(oracle, settings=test_settings).paginate(post)

    assert [p.type for p in pages] == ["main", "comments"]


@pytest.mark.asyncio
async def test_oversized_comment_is_replaced_by_its_chunks(make_oracle, events):
    settings = Settings(_env_file=None, MAX_SINGLE_COMMENT_HEIGHT=400, MAX_COMMENTS_PAGE_HEIGHT=450)
    long_body = "\n".join(f"Paragraph number {i} of a long answer." for i in range(8))
    oracle, _, _ = make_oracle()
    post = make_post(commentList=[
        {"author": "long", "body": long_body, "ups": 50},
        {"author": "short", "body": "Agreed.", "ups": 10},
    ])

    pages = await Paginator(oracle, settings=settings, events=events).paginate(post)

    entries = [c for p in pages for c in p.comments]
    long_chunks = [c for c in entries if c.author == "long"]
    assert len(long_chunks) > 1
    assert [c.is_continuation for c in long_chunks] == [False] + [True] * (len(long_chunks) - 1)
    assert "\n".join(c.body for c in long_chunks) == long_body
    assert entries[-1].author == "short"
    assert events.of_type("comment_split")[0]["author"] == "long"


@pytest.mark.asyncio
async def test_failing_comment_is_kept_unsplit(make_oracle, test_settings, events):
    def height(template_name, data, selector):
        if any(c["author"] == "broken" for c in data["comments"]):
            raise RuntimeError("render failed")
        return 100 * len(data["comments"])

    oracle, _, _ = make_oracle(height)
    post = make_post(commentList=[
        {"author": "fine", "body": "ok", "ups": 5},
        {"author": "broken", "body": "bad markup", "ups": 3},
    ])

    pages = await Paginator(oracle, settings=test_settings, events=events).paginate(post)

    assert [c.author for p in pages for c in p.comments] == ["fine", "broken"]
    fallback = events.of_type("comment_fallback")
    assert len(fallback) == 1 and fallback[0]["comment_index"] == 1


@pytest.mark.asyncio
async def test_pagination_is_deterministic(make_oracle, test_settings):
    post = make_post(
        selftext="\n".join("Some English text that wraps over several lines " * 3 for _ in range(9)),
        selftext_zh="\n".join("一些会换行的中文内容" * 6 for _ in range(7)),
        commentList=[{"author": f"u{i}", "body": "word " * (20 * i + 5), "ups": i % 4} for i in range(9)],
    )
    oracle, _, _ = make_oracle()
    paginator = Paginator(oracle, settings=test_settings)

    first = await paginator.paginate(post)
    second = await paginator.paginate(post)

    assert first == second


def test_select_comments_keeps_order_of_equal_scores(make_oracle, test_settings):
    oracle, _, _ = make_oracle()
    post = make_post(commentList=[
        {"author": "first", "body": "a", "ups": 5},
        {"author": "second", "body": "b", "ups": 5},
        {"author": "top", "body": "c", "ups": 9},
    ])

    selected = Paginator(oracle, settings=test_settings).select_comments(post)

    assert [c.author for c in selected] == ["top", "first", "second"]


def test_template_for_and_stats(test_settings):
    main = MainPage(title="t", ups=1, subreddit="s", content="x")
    continued = MainPage(type="main_continued", title="t", ups=1, subreddit="s", content="y")
    comments = CommentsPage(title="t", comments=(Comment(author="a", body="b", ups=1),))

    assert template_for(main, test_settings) == "main-card"
    assert template_for(continued, test_settings) == "main-card"
    assert template_for(comments, test_settings) == "comment-card"
    assert pagination_stats([main, continued, comments]) == {
        "total_pages": 3,
        "page_types": {"main": 1, "main_continued": 1, "comments": 1},
        "comments_shown": 1,
    }
