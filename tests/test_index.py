"""Tests for building the cross-reference index."""

import pytest

from pandoc_live_preview import XrefConfig
from pandoc_live_preview.errors import UnknownKindError
from pandoc_live_preview.index import Kind, scan_document


class TestSamples:
    """Documented end-to-end examples."""

    def test_figure_with_caption_and_reference(self):
        """An image figure referenced once is numbered, captioned and used."""
        index = scan_document("Figure ![Cat](cat.png){#fig:a}\nSee @fig:a.")

        assert len(index.definitions) == 1
        d = index.definitions[0]
        assert d.id == "a"
        assert d.kind is Kind.FIG
        assert d.sequence_number == 1
        assert d.caption == "Cat"
        assert d.is_unused is False

        assert len(index.references) == 1
        r = index.references[0]
        assert r.id == "a"
        assert r.kind is Kind.FIG
        assert r.is_broken is False
        assert index.orphan_references == ()

    def test_reference_without_definition(self):
        """A lone reference is broken and listed as an orphan."""
        index = scan_document("@fig:missing")
        assert index.definitions == ()
        assert len(index.references) == 1
        assert index.references[0].id == "missing"
        assert index.references[0].is_broken is True
        assert len(index.orphan_references) == 1

    def test_image_without_tag(self):
        """An untagged image is reported with its alt text."""
        index = scan_document("![Lonely](x.png)")
        assert len(index.undefined_images) == 1
        assert index.undefined_images[0].caption == "Lonely"
        assert index.undefined_images[0].position == 0

    def test_numbering_follows_definition_order(self):
        """Numbers follow definitions, not the order of references."""
        index = scan_document("@fig:b @fig:a {#fig:a} {#fig:b}")
        assert [(d.id, d.sequence_number) for d in index.definitions] == [("a", 1), ("b", 2)]


class TestNumbering:
    """Tests for sequence numbers and labels."""

    def test_kinds_are_numbered_independently(self):
        """Figures and tables each count from 1."""
        index = scan_document("{#fig:a}{#tbl:b}{#fig:c}{#tbl:d}")
        numbers = [(d.kind.value, d.id, d.sequence_number) for d in index.definitions]
        assert numbers == [("fig", "a", 1), ("tbl", "b", 1), ("fig", "c", 2), ("tbl", "d", 2)]

    def test_numbers_are_contiguous(self):
        """Numbers run 1..N with no gaps."""
        text = " ".join(f"{{#fig:f{i}}}" for i in range(10))
        index = scan_document(text)
        assert [d.sequence_number for d in index.definitions] == list(range(1, 11))

    def test_label_uses_configured_prefix(self):
        """Labels are prefix + number."""
        config = XrefConfig(fig_prefix="图", tbl_prefix="表")
        index = scan_document("{#fig:a}{#tbl:b}", config)
        assert [d.label for d in index.definitions] == ["图1", "表1"]

    def test_default_prefixes(self):
        """Default labels read 'Figure N' and 'Table N'."""
        index = scan_document("{#fig:a}{#tbl:b}")
        assert [d.label for d in index.definitions] == ["Figure 1", "Table 1"]

    def test_lookup_maps(self):
        """Number and position lookups resolve by kind and id."""
        index = scan_document("xx{#fig:a} {#tbl:b}")
        assert index.number_for(Kind.FIG, "a") == 1
        assert index.number_for("tbl", "b") == 1
        assert index.number_for(Kind.FIG, "b") is None
        assert index.position_for(Kind.FIG, "a") == 2
        assert index.definitions_of("tbl")[0].id == "b"


class TestClassification:
    """Tests for unused definitions and broken references."""

    def test_unreferenced_definition_is_unused(self):
        """A definition nobody mentions is unused."""
        index = scan_document("{#fig:a} {#fig:b} @fig:b")
        assert [d.is_unused for d in index.definitions] == [True, False]

    def test_reference_before_definition_resolves(self):
        """References may appear before their definition."""
        index = scan_document("@tbl:t\n\n: Data {#tbl:t}")
        assert index.references[0].is_broken is False
        assert index.definitions[0].is_unused is False

    def test_ids_are_shared_across_kinds(self):
        """By default @tbl:x resolves against {#fig:x}."""
        index = scan_document("{#fig:x} @tbl:x")
        assert index.references[0].is_broken is False
        assert index.definitions[0].is_unused is False
        assert index.is_defined(Kind.TBL, "x")
        assert index.number_for(Kind.TBL, "x") is None

    def test_scoped_ids_separate_kinds(self):
        """With scoped_ids, kinds must match for a reference to resolve."""
        index = scan_document("{#fig:x} @tbl:x", XrefConfig(scoped_ids=True))
        assert index.references[0].is_broken is True
        assert index.definitions[0].is_unused is True
        assert not index.is_defined(Kind.TBL, "x")
        assert index.is_defined(Kind.FIG, "x")

    def test_orphans_keep_document_order(self):
        """Orphan references are the broken subset, in order."""
        index = scan_document("@fig:z {#fig:a} @fig:a @tbl:y")
        assert [r.id for r in index.orphan_references] == ["z", "y"]

    def test_reference_position_is_at_sign(self):
        """Reference positions point at the '@', not the parenthesis."""
        index = scan_document("( @fig:a )")
        assert index.references[0].position == 2
        assert index.references[0].raw_text == "@fig:a"


class TestCaptions:
    """Tests for captions stored on definitions."""

    def test_caption_defaults_to_id(self):
        """Without an adjoining caption the id is used."""
        index = scan_document("Text {#fig:plot}")
        assert index.definitions[0].caption == "plot"

    def test_table_colon_caption(self):
        """Table captions come from the ': caption' line."""
        index = scan_document("| a |\n\n: Results by year {#tbl:r}")
        assert index.definitions[0].caption == "Results by year"

    def test_image_without_alt_text_defaults_to_id(self):
        """A tagged image with empty alt text is captioned with the id."""
        index = scan_document("![](http://h/y.png)\n{#fig:x} @fig:x")
        assert index.definitions[0].caption == "x"
        assert index.undefined_images == ()

    def test_table_after_image_url_defaults_to_id(self):
        """A table tag after an image never takes a caption from its URL."""
        index = scan_document("![](http://h/t.png){#tbl:a} @tbl:a")
        assert index.definitions[0].caption == "a"

    def test_untitled_image(self):
        """An untagged image without alt text gets a placeholder caption."""
        index = scan_document("![](x.png)")
        assert index.undefined_images[0].caption == "Untitled image"


class TestIndexProperties:
    """General properties of scanning."""

    def test_scanning_is_idempotent(self):
        """Scanning the same text twice yields equal indexes."""
        text = "![A](a.png){#fig:a} @fig:a @tbl:q\n: T {#tbl:t} ![B](b.png)"
        assert scan_document(text) == scan_document(text)

    def test_empty_text(self):
        """Any string is valid input, including the empty one."""
        index = scan_document("")
        assert index.definitions == ()
        assert index.references == ()
        assert index.undefined_images == ()

    def test_index_is_read_only(self):
        """Lookup maps cannot be modified."""
        index = scan_document("{#fig:a}")
        with pytest.raises(TypeError):
            index.fig_numbers["b"] = 2

    def test_summary_counts(self):
        """summary() reports the outline header counts."""
        index = scan_document("{#fig:a} {#tbl:b} @fig:a @fig:gone ![X](x.png)")
        summary = index.summary()
        assert summary.definitions == 2
        assert summary.figures == 1
        assert summary.tables == 1
        assert summary.references == 2
        assert summary.orphan_references == 1
        assert summary.unused_definitions == 1
        assert summary.undefined_images == 1
        assert str(summary) == "Definitions: 2 | Broken references: 1 | Undefined images: 1"

    def test_summary_counts_duplicate_ids(self):
        """Every definition tag is counted, even when ids repeat."""
        summary = scan_document("{#fig:a} {#fig:a} {#tbl:a} @fig:a").summary()
        assert summary.definitions == 3
        assert summary.figures == 2
        assert summary.tables == 1


class TestKind:
    """Tests for parsing kind names."""

    def test_parse_is_case_insensitive(self):
        assert Kind.parse("FIG") is Kind.FIG
        assert Kind.parse(" tbl ") is Kind.TBL

    def test_parse_unknown_kind(self):
        with pytest.raises(UnknownKindError):
            Kind.parse("eq")

    def test_unknown_kind_is_value_error(self):
        with pytest.raises(ValueError):
            Kind.parse("sec")
