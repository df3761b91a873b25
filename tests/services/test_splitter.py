"""SchemaSplitter的单元测试"""

from typing import Any

from pytest_mock import MockerFixture

from apiflow.schemas.pipeline import Node, OutputGroup, OutputPort
from apiflow.schemas.schema import PropertyNode
from apiflow.schemas.service import OperationDescriptor
from apiflow.services.node import NodeManager
from apiflow.services.splitter import SchemaSplitter

NESTED_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "a": {"type": "string"},
        "b": {"type": "object", "properties": {"c": {"type": "number"}}},
    },
}


def _node() -> Node:
    return Node(
        label="GET /nested",
        outputs=[OutputGroup(statusCode="200", items=[
            OutputPort(name="a", type="string", schema={"type": "string"}, path=["a"]),
            OutputPort(name="b", type="object", schema=NESTED_SCHEMA["properties"]["b"], path=["b"]),
        ])],
    )


class TestExtractProperties:
    """测试属性树展开"""

    def test_nested_object(self) -> None:
        """嵌套对象递归展开"""
        properties = SchemaSplitter().extract_properties(NESTED_SCHEMA, [])
        assert [(p.name, p.type, p.path) for p in properties] == [
            ("a", "string", ["a"]),
            ("b", "object", ["b"]),
        ]
        assert properties[0].children is None
        assert [(c.name, c.type, c.path) for c in properties[1].children or []] == [("c", "number", ["b", "c"])]

    def test_leaves(self) -> None:
        """叶子名称以点连接"""
        leaves = SchemaSplitter.collect_leaves(SchemaSplitter().extract_properties(NESTED_SCHEMA))
        assert {(leaf.name, leaf.type) for leaf in leaves} == {("a", "string"), ("b.c", "number")}

    def test_array_of_objects(self) -> None:
        """数组生成合成的items节点，元素属性挂在其下"""
        schema = {"type": "array", "items": {"type": "object", "properties": {"id": {"type": "integer"}}}}
        properties = SchemaSplitter().extract_properties(schema, ["list"])
        assert len(properties) == 1
        items = properties[0]
        assert (items.name, items.type, items.path, items.synthetic) == ("items", "object", ["list", "items"], True)
        assert [(c.name, c.path) for c in items.children or []] == [("id", ["list", "items", "id"])]

    def test_array_of_primitives(self) -> None:
        """原始类型数组的items是叶子"""
        properties = SchemaSplitter().extract_properties({"type": "array", "items": {"type": "string"}})
        assert properties[0].children is None
        assert properties[0].type == "string"
        leaves = SchemaSplitter.collect_leaves(properties)
        assert [leaf.name for leaf in leaves] == ["items"]

    def test_nested_array_property(self) -> None:
        """对象属性为数组时继续展开"""
        schema = {
            "type": "object",
            "properties": {
                "pets": {"type": "array", "items": {"type": "object", "properties": {"name": {"type": "string"}}}},
            },
        }
        leaves = SchemaSplitter.collect_leaves(SchemaSplitter().extract_properties(schema))
        assert [(leaf.name, leaf.path) for leaf in leaves] == [("pets.name", ["pets", "items", "name"])]

    def test_references(self, petstore: dict[str, Any]) -> None:
        """提供文档时解析属性中的引用"""
        schema = {"type": "object", "properties": {"owner": {"$ref": "#/components/schemas/Owner"}}}
        leaves = SchemaSplitter(petstore).collect_leaves(SchemaSplitter(petstore).extract_properties(schema))
        assert {leaf.name for leaf in leaves} == {"owner.name", "owner.address.city"}

    def test_unresolved_reference(self) -> None:
        """没有文档时引用视为未知类型的叶子"""
        schema = {"type": "object", "properties": {"owner": {"$ref": "#/components/schemas/Owner"}}}
        properties = SchemaSplitter().extract_properties(schema)
        assert [(p.name, p.type, p.children) for p in properties] == [("owner", "unknown", None)]

    def test_not_expandable(self) -> None:
        """原始类型与空Schema没有属性"""
        assert SchemaSplitter().extract_properties({"type": "string"}) == []
        assert SchemaSplitter().extract_properties(None) == []


class TestMaterializeSelected:
    """测试将选中的属性生成为输出端口"""

    def test_prefixed_leaf(self) -> None:
        """带前缀的叶子追加到同一分组，原端口保留"""
        node = _node()
        leaves = SchemaSplitter.collect_leaves(SchemaSplitter().extract_properties(NESTED_SCHEMA))
        selected = [leaf for leaf in leaves if leaf.name == "b.c"]

        new_node = SchemaSplitter.materialize_selected(node, 0, 1, selected, "foo")
        ports = {port.name: port for port in new_node.outputs[0].items}
        assert "b" in ports
        assert ports["foo.b.c"].type == "number"
        assert ports["foo.b.c"].path == ["b", "c"]
        assert ports["foo.b.c"].schema_ is None
        assert len(new_node.outputs[0].items) == 3

        # 原节点未被修改
        assert len(node.outputs[0].items) == 2

    def test_without_prefix(self) -> None:
        """不带前缀时使用叶子名称"""
        selected = [PropertyNode(name="c", type="number", path=["b", "c"])]
        new_node = SchemaSplitter.materialize_selected(_node(), 0, 1, selected)
        assert new_node.outputs[0].items[-1].name == "c"

    def test_empty_selection(self) -> None:
        """未选中任何属性时不做修改"""
        node = _node()
        assert SchemaSplitter.materialize_selected(node, 0, 1, []) is node

    def test_invalid_index(self) -> None:
        """分组或端口不存在时不做修改"""
        node = _node()
        selected = [PropertyNode(name="c", type="number", path=["b", "c"])]
        assert SchemaSplitter.materialize_selected(node, 3, 0, selected) is node
        assert SchemaSplitter.materialize_selected(node, 0, 9, selected) is node

    def test_unique_ids(self) -> None:
        """新端口ID与已有端口不重复"""
        selected = [PropertyNode(name="c", type="number", path=["b", "c"])] * 2
        new_node = SchemaSplitter.materialize_selected(_node(), 0, 1, selected)
        ids = [port.id for port in new_node.iter_outputs()]
        assert len(ids) == len(set(ids))


CATEGORY_DOCUMENT: dict[str, Any] = {
    "components": {
        "schemas": {
            "Category": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "parent": {"$ref": "#/components/schemas/Category"},
                    "children": {"type": "array", "items": {"$ref": "#/components/schemas/Category"}},
                },
            },
        },
    },
}


class TestRecursiveSchema:
    """测试自引用Schema的展开"""

    def test_self_reference(self) -> None:
        """已在展开路径上的引用作为object叶子"""
        splitter = SchemaSplitter(CATEGORY_DOCUMENT)
        leaves = splitter.collect_leaves(splitter.extract_properties({"$ref": "#/components/schemas/Category"}))
        assert {(leaf.name, leaf.type) for leaf in leaves} == {
            ("name", "string"),
            ("parent", "object"),
            ("children", "object"),
        }

    def test_split_synthesized_port(self) -> None:
        """拆分由自引用Schema生成的输出端口"""
        endpoint = OperationDescriptor(
            serviceId="svc", path="/c", method="get",
            responses={"200": {"content": {"application/json": {
                "schema": {"$ref": "#/components/schemas/Category"},
            }}}},
        )
        node = NodeManager.synthesize_call_node(endpoint, CATEGORY_DOCUMENT)
        parent = next(port for port in node.iter_outputs() if port.name == "parent")
        assert parent.type == "object"

        splitter = SchemaSplitter(CATEGORY_DOCUMENT)
        leaves = {
            leaf.name: leaf
            for leaf in splitter.collect_leaves(splitter.extract_properties(parent.schema_, parent.path))
        }
        assert leaves["name"].type == "string"
        assert leaves["parent.name"].type == "string"
        assert leaves["parent.parent"].type == "object"
        assert leaves["parent.parent"].children is None
        assert leaves["children.name"].path == ["parent", "children", "items", "name"]

    def test_depth_limit(self, mocker: MockerFixture) -> None:
        """引用层数超过最大深度时停止展开"""
        document = {
            "components": {
                "schemas": {
                    "A": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
                    "B": {"type": "object", "properties": {"c": {"type": "string"}}},
                },
            },
        }
        splitter = SchemaSplitter(document)
        mocker.patch.object(splitter, "_max_depth", 1)
        properties = splitter.extract_properties({"$ref": "#/components/schemas/A"})
        assert [(p.name, p.type, p.children) for p in properties] == [("b", "object", None)]
