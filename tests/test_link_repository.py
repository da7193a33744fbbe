from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from winwork import models, schemas
from winwork.errors import LinkMoveError

FOLDER = models.LinkType.FOLDER


def _layout(links):
    return sorted((link.id, link.parent_id, link.sort_order) for link in links.get_all())


def test_roots_are_exactly_links_without_parent(make_link, links):
    work = make_link("Work", type=FOLDER)
    home = make_link("Home", type=FOLDER)
    make_link("Docs", parent=work)
    make_link("Mail", parent=home)
    loose = make_link("Loose")

    roots = links.get_roots()

    assert [link.id for link in roots] == [work.id, home.id, loose.id]
    assert all(link.parent_id is None for link in roots)
    expected = {link.id for link in links.get_all() if link.parent_id is None}
    assert {link.id for link in roots} == expected


def test_create_appends_after_last_sibling(make_link, links):
    folder = make_link("Folder", type=FOLDER)
    first = make_link("First", parent=folder)
    second = make_link("Second", parent=folder)
    pinned = make_link("Pinned", parent=folder, sort_order=10)
    after = make_link("After", parent=folder)

    assert (first.sort_order, second.sort_order) == (1, 2)
    assert pinned.sort_order == 10
    assert after.sort_order == 11
    assert links.next_sort_order(folder.id) == 12
    assert links.next_sort_order(None) == 2
    assert [c.name for c in links.get_children(folder.id)] == ["First", "Second", "Pinned", "After"]


def test_move_missing_link_returns_false_without_changes(make_link, links):
    folder = make_link("Folder", type=FOLDER)
    make_link("Child", parent=folder)
    before = _layout(links)

    assert links.move(9999, folder.id, 1) is False
    assert _layout(links) == before


def test_move_within_parent_makes_room(make_link, links):
    a = make_link("A")
    b = make_link("B")
    c = make_link("C")

    assert links.move(c.id, None, 1) is True

    assert [(link.name, link.sort_order) for link in links.get_roots()] == [
        ("C", 1),
        ("A", 2),
        ("B", 3),
    ]
    assert {a.id, b.id, c.id} == {link.id for link in links.get_roots()}


def test_move_into_folder_inserts_at_position(make_link, links):
    folder = make_link("Folder", type=FOLDER)
    make_link("One", parent=folder)
    make_link("Two", parent=folder)
    loose = make_link("Loose")

    assert links.move(loose.id, folder.id, 2) is True

    children = links.get_children(folder.id)
    assert [(c.name, c.sort_order) for c in children] == [("One", 1), ("Loose", 2), ("Two", 3)]
    assert [link.name for link in links.get_roots()] == ["Folder"]


def test_move_clamps_position_to_end(make_link, links):
    folder = make_link("Folder", type=FOLDER)
    make_link("One", parent=folder)
    loose = make_link("Loose")

    links.move(loose.id, folder.id, 50)

    assert [(c.name, c.sort_order) for c in links.get_children(folder.id)] == [
        ("One", 1),
        ("Loose", 2),
    ]


def test_move_into_own_descendant_is_rejected(make_link, links):
    outer = make_link("Outer", type=FOLDER)
    inner = make_link("Inner", type=FOLDER, parent=outer)
    make_link("Leaf", parent=inner)
    before = _layout(links)

    with pytest.raises(LinkMoveError):
        links.move(outer.id, inner.id, 1)
    with pytest.raises(LinkMoveError):
        links.move(outer.id, outer.id, 1)

    assert _layout(links) == before


def test_move_requires_existing_folder_parent(make_link, links):
    leaf = make_link("Leaf")
    other = make_link("Other")

    with pytest.raises(LinkMoveError):
        links.move(leaf.id, other.id, 1)
    with pytest.raises(LinkMoveError):
        links.move(leaf.id, 12345, 1)


def test_descendants_are_listed_bottom_up(make_link, links):
    root = make_link("Root", type=FOLDER)
    sub = make_link("Sub", type=FOLDER, parent=root)
    deep = make_link("Deep", parent=sub)
    side = make_link("Side", parent=root)

    ordered = links.get_descendant_ids(root.id)

    assert set(ordered) == {sub.id, deep.id, side.id}
    assert ordered.index(deep.id) < ordered.index(sub.id)
    assert links.is_descendant(deep.id, root.id)
    assert not links.is_descendant(root.id, deep.id)


def test_search_matches_fields_and_tags(make_link, links, tags, session):
    python = make_link("Python docs", url="https://docs.python.org")
    notes = make_link("Scratch", type=models.LinkType.NOTES, notes="remember the PYTHON talk")
    described = make_link("Wiki", description="Python internals")
    tagged = make_link("Tracker")
    make_link("Unrelated")
    tag = tags.create(schemas.TagCreate(name="Pythonic"))
    tags.add_tag_to_link(tagged.id, tag.id)
    links.record_access(described.id)
    links.record_access(described.id)

    results = links.search("  python ")

    assert {link.id for link in results} == {python.id, notes.id, described.id, tagged.id}
    assert results[0].id == described.id
    assert links.search("   ") == []


def test_search_treats_wildcards_literally(make_link, links):
    make_link("100% coverage")
    make_link("Other")

    assert [link.name for link in links.search("100%")] == ["100% coverage"]
    assert links.search("_") == []


def test_access_rankings_skip_folders(make_link, links, session):
    make_link("Folder", type=FOLDER)
    often = make_link("Often")
    once = make_link("Once")
    make_link("Never")
    for _ in range(3):
        links.record_access(often.id)
    links.record_access(once.id)
    once.last_accessed_at = datetime.now(timezone.utc) + timedelta(minutes=5)
    session.commit()

    assert [link.name for link in links.get_most_accessed(2)] == ["Often", "Once"]
    assert [link.name for link in links.get_recently_accessed()] == ["Once", "Often"]
    assert links.get_by_id(often.id).access_count == 3


def test_record_access_on_missing_link_is_noop(links):
    links.record_access(404)


def test_delete_removes_tag_rows(make_link, links, tags, session):
    link = make_link("Tagged")
    tag = tags.create(schemas.TagCreate(name="Work"))
    tags.add_tag_to_link(link.id, tag.id)

    assert links.delete(link.id) is True
    assert links.delete(link.id) is False
    assert session.scalar(select(func.count()).select_from(models.LinkTag)) == 0
    assert tags.get_by_id(tag.id) is not None


def test_get_by_tag(make_link, links, tags):
    first = make_link("First")
    second = make_link("Second")
    make_link("Third")
    tag = tags.create(schemas.TagCreate(name="Work"))
    tags.add_tag_to_link(first.id, tag.id)
    tags.add_tag_to_link(second.id, tag.id)
    links.record_access(second.id)

    assert [link.name for link in links.get_by_tag(tag.id)] == ["Second", "First"]
