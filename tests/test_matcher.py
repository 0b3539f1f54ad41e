"""Tests for cross-reference pattern matching."""

from pandoc_live_preview.matcher import (
    CaptionSource,
    find_caption,
    find_definitions,
    find_images,
    find_references,
    scan,
)


class TestFindDefinitions:
    """Tests for {#kind:id} tag matching."""

    def test_figure_and_table_tags(self):
        """Both kinds are matched in document order."""
        text = "{#fig:a} and {#tbl:b width=50%}"
        defs = find_definitions(text)
        assert [(d.kind, d.id) for d in defs] == [("fig", "a"), ("tbl", "b")]
        assert defs[0].start == 0
        assert defs[0].end == 8
        assert defs[1].start == 13
        assert defs[1].end == len(text)

    def test_id_characters(self):
        """Ids may contain letters, digits, underscores and hyphens."""
        defs = find_definitions("{#fig:My_fig-01}")
        assert defs[0].id == "My_fig-01"

    def test_malformed_tags_are_ignored(self):
        """Incomplete tags simply do not match."""
        assert find_definitions("{#fig:} {#eq:x} #fig:y {fig:z} {#fig:a") == []

    def test_tags_inside_code_spans_are_matched(self):
        """There is no Markdown awareness."""
        assert len(find_definitions("`{#fig:a}`")) == 1


class TestFindReferences:
    """Tests for @kind:id reference matching."""

    def test_plain_reference(self):
        """A bare reference covers only the token."""
        refs = find_references("See @fig:a.")
        assert len(refs) == 1
        ref = refs[0]
        assert (ref.kind, ref.id) == ("fig", "a")
        assert ref.start == ref.token_start == 4
        assert ref.end == ref.token_end == 10
        assert ref.raw_text == "@fig:a"
        assert not ref.has_paren

    def test_paired_parentheses(self):
        """Whitespace inside the parentheses is part of the match."""
        refs = find_references("See ( @fig:a ) now")
        ref = refs[0]
        assert ref.has_paren
        assert ref.start == 4
        assert ref.end == 14
        assert ref.token_start == 6
        assert ref.token_end == 12

    def test_closing_parenthesis_alone(self):
        """A closing parenthesis without an opening one is not a pair."""
        ref = find_references("@fig:a)")[0]
        assert ref.has_close_paren
        assert not ref.has_open_paren
        assert not ref.has_paren

    def test_opening_parenthesis_alone(self):
        """An opening parenthesis without a closing one is not a pair."""
        ref = find_references("(@fig:a")[0]
        assert ref.has_open_paren
        assert not ref.has_paren

    def test_single_letter_suffix(self):
        """A standalone letter after the id becomes the suffix."""
        ref = find_references("( @fig:a b )")[0]
        assert ref.suffix == "b"
        assert ref.has_paren

    def test_word_after_reference_is_not_a_suffix(self):
        """Only a one-letter token counts as a suffix."""
        ref = find_references("@fig:a shows")[0]
        assert ref.suffix == ""
        assert ref.token_end == 6

    def test_multiple_references_in_order(self):
        """References are returned in document order."""
        refs = find_references("@tbl:x then @fig:y")
        assert [r.raw_text for r in refs] == ["@tbl:x", "@fig:y"]


class TestFindImages:
    """Tests for image markup matching."""

    def test_image_followed_by_figure_tag(self):
        """An image directly followed by {#fig: is defined."""
        images = find_images("![Cat](cat.png){#fig:a}")
        assert len(images) == 1
        assert images[0].alt == "Cat"
        assert images[0].is_defined

    def test_image_without_tag(self):
        """An image with no tag after it is undefined."""
        images = find_images("![Lonely](x.png)")
        assert not images[0].is_defined

    def test_whitespace_between_image_and_tag(self):
        """Line breaks between the image and the tag are allowed."""
        assert find_images("![A](a.png)\n\n{#fig:x}")[0].is_defined

    def test_table_tag_does_not_define_image(self):
        """Only figure tags label images."""
        assert not find_images("![A](a.png){#tbl:x}")[0].is_defined

    def test_angle_bracket_url(self):
        """Angle brackets allow parentheses inside the URL."""
        text = "![P](<img (1).png>){#fig:p}"
        images = find_images(text)
        assert images[0].alt == "P"
        assert images[0].end == text.index("{")
        assert images[0].is_defined


class TestFindCaption:
    """Tests for caption attribution."""

    def test_image_alt_caption(self):
        """Alt text of the preceding image becomes the caption."""
        text = "![Cat](cat.png)  {#fig:a}"
        caption = find_caption(text, text.index("{"), "fig")
        assert caption.source is CaptionSource.IMAGE
        assert caption.text == "Cat"
        assert caption.start == 0

    def test_alt_text_is_stripped(self):
        """Surrounding whitespace in alt text is removed."""
        text = "![  A cat ](cat.png){#fig:a}"
        assert find_caption(text, text.index("{"), "fig").text == "A cat"

    def test_empty_alt_still_counts_as_image(self):
        """An image without alt text adjoins the tag with an empty caption."""
        text = "![](cat.png){#fig:a}"
        caption = find_caption(text, text.index("{"), "fig")
        assert caption.source is CaptionSource.IMAGE
        assert caption.text == ""
        assert caption.start == 0

    def test_empty_alt_image_blocks_colon_rule(self):
        """The colon in an image URL is never read as a table caption."""
        text = "![](http://h/t.png){#tbl:a}"
        caption = find_caption(text, text.index("{"), "tbl")
        assert caption.source is CaptionSource.IMAGE
        assert caption.text == ""

    def test_table_colon_caption(self):
        """Table tags take a ': caption' run on the same line."""
        text = "| a |\n\n: Results {#tbl:r}"
        caption = find_caption(text, text.index("{"), "tbl")
        assert caption.source is CaptionSource.COLON
        assert caption.text == "Results"
        assert caption.start == text.index(":")

    def test_figure_ignores_colon_caption(self):
        """Colon captions are only used for tables."""
        text = ": Results {#fig:r}"
        assert find_caption(text, text.index("{"), "fig") is None

    def test_image_wins_over_colon_for_tables(self):
        """Image alt text takes precedence over a colon caption."""
        text = ": Colon ![Alt](a.png){#tbl:r}"
        caption = find_caption(text, text.index("{"), "tbl")
        assert caption.source is CaptionSource.IMAGE
        assert caption.text == "Alt"

    def test_colon_caption_must_be_on_same_line(self):
        """A line break between caption and tag breaks the link."""
        text = ": Caption\n{#tbl:x}"
        assert find_caption(text, text.index("{"), "tbl") is None

    def test_image_outside_lookback_window(self):
        """Images more than 500 characters back are not considered."""
        text = "![Cat](c.png)" + " " * 600 + "{#fig:a}"
        assert find_caption(text, text.index("{"), "fig") is None


def test_scan_collects_all_occurrences():
    """scan() bundles definitions, references and images."""
    result = scan("![A](a.png){#fig:a} @fig:a ![B](b.png)")
    assert len(result.definitions) == 1
    assert len(result.references) == 1
    assert len(result.images) == 2
