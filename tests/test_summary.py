import pytest

from mdtome.summary import (
    Link,
    PartTitle,
    SectionNumber,
    Separator,
    Summary,
    get_last_link,
    update_section_numbers,
)


@pytest.mark.parametrize(
    ("parts", "expected"),
    [([0], "0."), ([1, 3], "1.3."), ([1, 2, 3], "1.2.3.")],
)
def test_section_number_has_correct_dotted_representation(parts, expected):
    assert str(SectionNumber(parts)) == expected


def test_empty_section_number_renders_zero():
    assert str(SectionNumber()) == "0"


def test_section_number_child_does_not_mutate_parent():
    parent = SectionNumber([1])
    child = parent.child(2)
    assert child == SectionNumber([1, 2])
    assert parent == SectionNumber([1])


def test_section_number_behaves_like_sequence():
    number = SectionNumber([4, 5])
    number[1] += 1
    assert list(number) == [4, 6]
    assert len(number) == 2
    assert number[0] == 4


def test_link_defaults():
    link = Link()
    assert link.name == ""
    assert link.location == ""
    assert link.number is None
    assert link.nested_items == []


def test_separators_compare_equal():
    assert Separator() == Separator()
    assert Separator() != PartTitle("x")


def test_update_section_numbers_shifts_root_level_recursively():
    nested = Link("Nested", "n.md", SectionNumber([1, 1]))
    items = [
        Link("First", "a.md", SectionNumber([1]), [nested]),
        Separator(),
        Link("Second", "b.md", SectionNumber([2])),
    ]
    update_section_numbers(items, 0, 3)
    assert items[0].number == SectionNumber([4])
    assert nested.number == SectionNumber([4, 1])
    assert items[2].number == SectionNumber([5])


def test_update_section_numbers_skips_links_without_numbers():
    link = Link("Prefix", "p.md")
    update_section_numbers([link], 0, 2)
    assert link.number is None


def test_get_last_link_returns_index_and_link():
    first = Link("First", "a.md")
    second = Link("Second", "b.md")
    items = [first, Separator(), second, Separator(), PartTitle("Part")]
    index, link = get_last_link(items)
    assert index == 2
    assert link is second


def test_get_last_link_without_links_raises():
    with pytest.raises(ValueError):
        get_last_link([Separator(), PartTitle("Only")])


def test_summary_all_items_in_order():
    prefix = Link("Intro", "intro.md")
    numbered = Link("One", "one.md", SectionNumber([1]))
    suffix = Link("Outro", "outro.md")
    summary = Summary(
        title="Summary",
        prefix_chapters=[prefix],
        numbered_chapters=[numbered, Separator()],
        suffix_chapters=[suffix],
    )
    assert list(summary.all_items()) == [prefix, numbered, Separator(), suffix]


def test_empty_summary_has_no_items():
    assert list(Summary().all_items()) == []