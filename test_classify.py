#!/usr/bin/env python3
"""
Test file classification and display ordering.
"""

import dataclasses
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from classify import (
    FileEntry,
    classify_file,
    classify_name,
    first_primary_source,
    language_for,
    sort_entries,
    text_entry,
)


def text(name: str, primary: bool = False) -> FileEntry:
    return FileEntry(name=name, content="", is_primary_source=primary)


def test_tex_source():
    labels = classify_name("main.tex")
    assert labels.is_text and labels.is_tex_source
    assert not labels.is_image and not labels.is_pdf
    assert labels.mime_type == "text/x-tex"
    assert labels.language == "latex"

    entry = classify_file("main.tex", b"\\begin{document}")
    assert entry.is_text and not entry.is_binary
    assert entry.is_primary_source
    assert entry.content == "\\begin{document}"
    assert entry.binary_payload is None
    print("✓ .tex is primary text")


def test_auxiliary_text_files():
    for name, language in [
        ("refs.bib", "bibtex"),
        ("plain.bst", "bibtex"),
        ("style.sty", "latex"),
        ("article.cls", "latex"),
        ("README.md", "plaintext"),
        ("paper.bbl", "plaintext"),
        ("00README.txt", "plaintext"),
    ]:
        entry = classify_file(name, b"content")
        assert entry.is_text, name
        assert not entry.is_primary_source, name
        assert entry.language == language, name
    print("✓ Auxiliary LaTeX files are text")


def test_images_and_pdf():
    assert classify_name("fig1.png").mime_type == "image/png"
    assert classify_name("photo.JPG").mime_type == "image/jpeg"
    assert classify_name("diagram.eps").is_image

    pdf = classify_name("figs/plot.pdf")
    assert pdf.is_pdf and not pdf.is_image and pdf.mime_type == "application/pdf"

    entry = classify_file("fig1.png", b"\x89PNG\r\n\x1a\n")
    assert entry.is_binary and entry.binary_payload == b"\x89PNG\r\n\x1a\n"
    assert entry.content is None
    assert not entry.is_primary_source
    print("✓ Images and PDFs are binary with their MIME type")


def test_everything_else_is_octet_stream():
    for name in ("Makefile", "data.dat", "archive.tar", ".hidden", "noext."):
        labels = classify_name(name)
        assert not labels.is_text and labels.mime_type == "application/octet-stream", name
        assert classify_file(name, b"abc").is_binary, name
    print("✓ Unknown extensions are octet-stream")


def test_extension_case_insensitive():
    entry = classify_file("MAIN.TEX", b"x")
    assert entry.is_text and entry.is_primary_source
    print("✓ Extensions compare case-insensitively")


def test_undecodable_text_becomes_binary():
    latin1 = "Schr\xf6dinger".encode("latin-1")
    entry = classify_file("paper.tex", latin1)

    assert entry.is_binary
    assert entry.binary_payload == latin1
    assert entry.mime_type == "application/octet-stream"
    assert not entry.is_primary_source
    print("✓ Invalid UTF-8 is reclassified as binary")


def test_classification_is_idempotent():
    for name in ("main.tex", "refs.bib", "fig.png", "x.pdf", "Makefile", "a/b/c.sty"):
        assert classify_name(name) == classify_name(name)
        assert classify_file(name, b"abc") == classify_file(name, b"abc")
    print("✓ Classification is a pure function of the name")


def test_text_entry_always_decodes():
    entry = text_entry("2301.01234.tex", b"ok \xff\xfe")
    assert entry.is_text and entry.is_primary_source
    assert entry.content.startswith("ok ")
    assert entry.language == "latex"
    print("✓ Synthetic single-file entry")


def test_file_entry_invariants():
    for kwargs in (
        {"name": "", "content": "x"},
        {"name": "a.tex"},
        {"name": "a.tex", "content": "x", "binary_payload": b"x"},
    ):
        try:
            FileEntry(**kwargs)
            assert False, f"FileEntry({kwargs}) should fail"
        except ValueError:
            pass

    entry = FileEntry(name="a.tex", content="x")
    try:
        entry.content = "y"
        assert False, "FileEntry should be frozen"
    except dataclasses.FrozenInstanceError:
        pass

    assert FileEntry(name="é.txt", content="héllo").size == len("héllo".encode("utf-8"))
    assert FileEntry(name="b.bin", binary_payload=b"1234").size == 4
    print("✓ FileEntry invariants")


def test_file_entry_default_mime_type():
    assert FileEntry(name="a.tex", content="x").mime_type == "text/plain"
    assert FileEntry(name="b.bin", binary_payload=b"\x00").mime_type == "application/octet-stream"
    assert FileEntry(name="c.png", binary_payload=b"p", mime_type="image/png").mime_type == "image/png"
    print("✓ Default MIME type follows the payload kind")


def test_language_for():
    assert language_for("x.tex") == "latex"
    assert language_for("x.bib") == "bibtex"
    assert language_for("x.md") == "plaintext"
    assert language_for("x") == "plaintext"
    print("✓ Language tags")


def test_sort_primary_first_then_name():
    entries = [
        text("refs.bib"),
        text("b.tex", primary=True),
        FileEntry(name="fig.png", binary_payload=b"p", mime_type="image/png"),
        text("B.tex", primary=True),
        text("a.tex", primary=True),
        text("Zeta.sty"),
    ]
    ordered = sort_entries(entries)

    assert [e.name for e in ordered] == ["B.tex", "a.tex", "b.tex", "Zeta.sty", "fig.png", "refs.bib"]

    seen_other = False
    for entry in ordered:
        if not entry.is_primary_source:
            seen_other = True
        assert not (seen_other and entry.is_primary_source)
    print("✓ Primary sources first, then case-sensitive names")


def test_sort_is_stable_and_idempotent():
    entries = [text("sec/b.tex", True), text("sec/a.tex", True), text("sec.bib"), text("sec")]
    once = sort_entries(entries)
    twice = sort_entries(once)
    assert once == twice
    assert [e.name for e in once] == ["sec/a.tex", "sec/b.tex", "sec", "sec.bib"]

    # equal keys keep their input order
    first = FileEntry(name="same.tex", content="1", is_primary_source=True)
    second = FileEntry(name="same.tex", content="2", is_primary_source=True)
    assert [e.content for e in sort_entries([first, second])] == ["1", "2"]
    print("✓ Sorting is stable and idempotent")


def test_first_primary_source():
    entries = sort_entries([text("refs.bib"), text("main.tex", True)])
    assert first_primary_source(entries).name == "main.tex"
    assert first_primary_source([text("refs.bib")]).name == "refs.bib"
    assert first_primary_source([]) is None
    print("✓ Auto-selected entry")


def main():
    print("=" * 60)
    print("TEST: Classifier and ordering")
    print("=" * 60)

    test_tex_source()
    test_auxiliary_text_files()
    test_images_and_pdf()
    test_everything_else_is_octet_stream()
    test_extension_case_insensitive()
    test_undecodable_text_becomes_binary()
    test_classification_is_idempotent()
    test_text_entry_always_decodes()
    test_file_entry_invariants()
    test_file_entry_default_mime_type()
    test_language_for()
    test_sort_primary_first_then_name()
    test_sort_is_stable_and_idempotent()
    test_first_primary_source()

    print("\n✓ ALL CLASSIFY TESTS PASSED")


if __name__ == "__main__":
    main()
