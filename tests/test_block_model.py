import pytest

from feishu_md.services.block_model import (
    Block,
    BlockTree,
    BlockType,
    ImageBlock,
    MissingRootError,
    UnsupportedPayload,
    align_style,
    block_type_name,
    code_language,
    heading_level,
)


def test_from_api_selects_payload_by_type() -> None:
    block = Block.from_api(
        {
            "block_id": "h",
            "block_type": 5,
            "parent_id": "root",
            "heading3": {"elements": [{"text_run": {"content": "标题"}}], "style": {}},
        }
    )

    assert heading_level(block.block_type) == 3
    assert block.text is not None
    assert block.text.elements[0].text_run.content == "标题"


def test_from_api_keeps_unknown_types_as_unsupported() -> None:
    block = Block.from_api({"block_id": "x", "block_type": 777, "custom": {"a": 1}})

    assert isinstance(block.payload, UnsupportedPayload)
    assert block.text is None
    assert block.raw["custom"] == {"a": 1}
    assert block_type_name(777) == "777"
    assert block_type_name(BlockType.SHEET) == "SHEET"


def test_image_payload_ignores_extra_fields() -> None:
    block = Block.from_api(
        {"block_id": "i", "block_type": 27, "image": {"token": "t", "width": 10, "scale": 2}}
    )

    assert isinstance(block.payload, ImageBlock)
    assert block.payload.token == "t"
    assert block.payload.width == 10


def test_block_tree_lookup_and_missing_children() -> None:
    tree = BlockTree.from_api(
        [
            {"block_id": "root", "block_type": 1, "children": ["a", "missing"]},
            {"block_id": "a", "block_type": 2, "parent_id": "root"},
        ]
    )

    assert tree.root.block_id == "root"
    assert [child.block_id for child in tree.children(tree.root)] == ["a"]
    assert tree.parent_of(tree.get("a")) is tree.root
    assert tree.parent_of(tree.root) is None
    assert len(tree) == 2


def test_block_tree_without_page_raises() -> None:
    tree = BlockTree.from_api([{"block_id": "a", "block_type": 2}])

    with pytest.raises(MissingRootError):
        _ = tree.root


def test_code_language_and_alignment() -> None:
    assert code_language(1) == "text"
    assert code_language(7) == "bash"
    assert code_language(9) == "cpp"
    assert code_language(49) == "python"
    assert code_language(None) == ""
    assert code_language(9999) == ""
    assert align_style(None) == "left"
    assert align_style(2) == "center"
    assert align_style(3) == "right"
