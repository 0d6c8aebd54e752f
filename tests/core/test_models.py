from pagecraft.core.models import Document, Node, Page


WIRE = {
    "pages": [
        {
            "_id": "page-home",
            "name": "Home",
            "slug": "/",
            "seoTitle": "Home Page",
            "elements": [
                {"id": "n2", "type": "heading", "config": {"text": "Hi"}, "order": 7, "label": "Heading"},
                {
                    "id": "n3",
                    "type": "section",
                    "order": 3,
                    "config": {
                        "id": "box",
                        "backgroundColor": "#fff",
                        "elements": [{"id": "n4", "type": "text", "config": {}, "order": 0}],
                    },
                },
                {
                    "id": "n5",
                    "type": "columns",
                    "config": {
                        "count": 2,
                        "columns": [
                            {"id": "ca", "elements": [{"id": "n6", "type": "button", "config": {"text": "Go"}}]},
                            {"elements": []},
                        ],
                    },
                },
            ],
        }
    ],
    "globalSettings": {"fontFamily": "Inter"},
}


def test_from_dict_builds_nested_nodes(id_factory):
    doc = Document.from_dict(WIRE, id_factory)
    page = doc.pages[0]
    assert page.id == "page-home"
    assert page.seo_title == "Home Page" and page.seo_description is None
    section = page.elements[1]
    assert isinstance(section.config["elements"][0], Node)
    column_b = page.elements[2].config["columns"][1]
    assert column_b["id"] == "id1"
    assert isinstance(page.elements[2].config["columns"][0]["elements"][0], Node)
    assert doc.global_settings == {"fontFamily": "Inter"}


def test_round_trip_preserves_ids_and_rewrites_order(id_factory):
    data = Document.from_dict(WIRE, id_factory).to_dict()
    page = data["pages"][0]
    assert page["id"] == "page-home"
    assert [el["id"] for el in page["elements"]] == ["n2", "n3", "n5"]
    assert [el["order"] for el in page["elements"]] == [0, 1, 2]
    assert page["elements"][0]["label"] == "Heading"
    assert "label" not in page["elements"][1]
    assert page["elements"][1]["config"]["elements"][0]["id"] == "n4"
    assert page["elements"][2]["config"]["columns"][0]["elements"][0]["order"] == 0
    assert "seoDescription" not in page
    assert data["globalSettings"] == {"fontFamily": "Inter"}

    again = Document.from_dict(data).to_dict()
    assert again == data


def test_missing_ids_are_minted(id_factory):
    page = Page.from_dict({"name": "X", "slug": "/x", "elements": [{"type": "text", "config": {}}]}, id_factory)
    assert page.id and page.elements[0].id
    assert page.id != page.elements[0].id


def test_to_dict_does_not_share_config(tree):
    node = tree.node("a", "faq", items=[{"q": 1}])
    data = node.to_dict()
    data["config"]["items"].append({"q": 2})
    assert node.config["items"] == [{"q": 1}]
