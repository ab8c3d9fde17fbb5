from sticker_engine import load_catalog, parse_catalog


def test_parse_catalog_skips_incomplete_rows():
    text = (
        "image,link\n"
        "a.png,https://example.com/a\n"
        "b.png,\n"
        ",https://example.com/c\n"
        " d.png , https://example.com/d \n"
    )
    items = parse_catalog(text)

    assert [item.image for item in items] == ["a.png", "d.png"]
    assert [item.id for item in items] == [0, 1]
    assert items[1].link == "https://example.com/d"


def test_parse_catalog_without_expected_columns():
    assert parse_catalog("name,url\na.png,https://example.com\n") == []


def test_load_catalog_from_file(tmp_path):
    path = tmp_path / "links.csv"
    path.write_text("image,link\nx.png,https://example.com/x\n", encoding="utf-8")
    items = load_catalog(str(path))
    assert len(items) == 1
    assert items[0].image == "x.png"


def test_load_catalog_missing_file(tmp_path):
    assert load_catalog(str(tmp_path / "nope.csv")) == []
