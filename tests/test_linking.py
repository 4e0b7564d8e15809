from datetime import datetime, timedelta, timezone

from content_ingest.services.linking import append_tag_summary, build_topic_links, link_topic, link_work

from conftest import make_topic, make_work

BASE = datetime(2026, 10, 1, tzinfo=timezone.utc)


def _seed_works(repo, count: int, title: str = "Big sale title", entities=None, body: str = "") -> list[str]:
    slugs = []
    for i in range(count):
        w = make_work(
            f"w-{i:02d}",
            title,
            body=body,
            entities=entities(i) if callable(entities) else entities,
            published_at=BASE + timedelta(hours=i),
        )
        repo.upsert_article(w)
        slugs.append(w.slug)
    return slugs


def test_topic_links_are_capped(repo) -> None:
    _seed_works(repo, 12, entities=lambda i: [f"p-{i}", f"p-{i + 1}"])

    links = build_topic_links(repo, "Today's sale picks")

    assert links.tags == ["sale"]
    assert len(links.related_works) == 6
    assert len(set(links.related_works)) == 6
    assert len(links.related_entities) == 6
    assert len(set(links.related_entities)) == 6


def test_topic_links_use_most_recent_pool(repo) -> None:
    _seed_works(repo, 25)

    links = build_topic_links(repo, "sale")

    # pool is the 20 newest works, newest first
    assert links.related_works == [f"w-{i:02d}" for i in range(24, 18, -1)]


def test_link_topic_appends_at_most_two_tag_notes(repo) -> None:
    topic = make_topic("t-1", "Exclusive 4K sale today")
    topic.body = "Body text"

    link_topic(topic, repo)

    assert topic.body.startswith("Body text\n\nTag notes:\n")
    notes = topic.body.split("Tag notes:\n", 1)[1].splitlines()
    assert notes == ["- #Exclusive: Available from a single distributor only.", "- #4K: Delivered in 4K resolution."]


def test_append_tag_summary_without_tags_keeps_body() -> None:
    assert append_tag_summary("unchanged", []) == "unchanged"


def test_link_work_collects_works_sharing_an_entity(repo) -> None:
    _seed_works(repo, 3, title="Quiet", entities=["mika-sato"])
    article = make_work("w-new", "Quiet", entities=["mika-sato"], published_at=BASE + timedelta(days=1))

    link_work(article, repo)

    assert set(article.related_works) == {"w-00", "w-01", "w-02"}
    assert "w-new" not in article.related_works


def test_link_work_excludes_itself_when_already_persisted(repo) -> None:
    article = make_work("w-self", "Quiet", entities=["mika-sato"])
    repo.upsert_article(article)
    _seed_works(repo, 2, title="Quiet", entities=["mika-sato"])

    link_work(article, repo)

    assert "w-self" not in article.related_works
    assert set(article.related_works) == {"w-00", "w-01"}


def test_link_work_is_capped_at_eight(repo) -> None:
    _seed_works(repo, 6, title="Quiet", entities=["a", "b"], body="Maker: North Studio")
    extra = [
        make_work(f"x-{i}", "Quiet", entities=["c"], body="Maker: North Studio", published_at=BASE + timedelta(days=2, hours=i))
        for i in range(6)
    ]
    for w in extra:
        repo.upsert_article(w)

    article = make_work("w-new", "Quiet", entities=["a", "b", "c"], body="Maker: North Studio")
    link_work(article, repo)

    assert len(article.related_works) == 8
    assert len(set(article.related_works)) == 8


def test_link_work_adds_matches_on_maker_line(repo) -> None:
    repo.upsert_article(make_work("m-1", "One", body="Maker: North Studio\nGenre: Drama"))
    repo.upsert_article(make_work("m-2", "Two", body="Maker: South Studio\nGenre: Comedy"))
    repo.upsert_article(make_work("e-1", "Three", entities=["ren-ito"]))

    article = make_work("w-new", "New", entities=["ren-ito"], body="Maker: North Studio\nGenre: Travel")
    link_work(article, repo)

    assert article.related_works == ["e-1", "m-1"]


def test_link_work_meta_matches_limited_to_four(repo) -> None:
    for i in range(10):
        repo.upsert_article(
            make_work(f"m-{i}", "Same maker", body="Maker: North Studio", published_at=BASE + timedelta(hours=i))
        )

    article = make_work("w-new", "New", body="Maker: North Studio")
    link_work(article, repo)

    assert article.related_works == ["m-9", "m-8", "m-7", "m-6"]
