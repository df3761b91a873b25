"""数据结构的单元测试"""

from apiflow.schemas.enum_var import EdgeRejectReason, HTTPMethod
from apiflow.schemas.pipeline import Edge, EdgeResult, Node, OutputGroup, OutputPort, Pipeline
from apiflow.schemas.service import OperationDescriptor, ServiceDescriptor


def test_alias() -> None:
    """同时支持字段名与别名"""
    edge = Edge(sourceNodeId="a", targetNodeId="b", sourcePortId="p", targetPortId="q")
    same = Edge(id=edge.id, source_node_id="a", target_node_id="b", source_port_id="p", target_port_id="q")
    assert edge == same
    assert set(edge.model_dump(by_alias=True)) == {"id", "sourceNodeId", "targetNodeId", "sourcePortId", "targetPortId"}


def test_output_port_schema_alias() -> None:
    """输出端口的schema字段"""
    port = OutputPort(name="items", type="array", schema={"type": "array"})
    assert port.schema_ == {"type": "array"}
    assert port.model_dump(by_alias=True)["schema"] == {"type": "array"}


def test_find_ports() -> None:
    """在所有分组中查找输出端口"""
    second = OutputPort(name="error", type="string")
    node = Node(outputs=[
        OutputGroup(statusCode="200", items=[OutputPort(name="ok", type="string")]),
        OutputGroup(statusCode="404", items=[second]),
    ])
    assert node.find_output(second.id) is second
    assert node.find_output("missing") is None
    assert node.find_input("missing") is None
    assert len(list(node.iter_outputs())) == 2


def test_edge_result() -> None:
    """连线结果"""
    assert not EdgeResult(reason=EdgeRejectReason.TYPE_MISMATCH).accepted
    edge = Edge(sourceNodeId="a", targetNodeId="b", sourcePortId="p", targetPortId="q")
    assert EdgeResult(edge=edge).accepted


def test_pipeline_roundtrip() -> None:
    """Pipeline按别名序列化后可以还原"""
    pipeline = Pipeline(name="demo", globalVariables={"token": "x"})
    data = pipeline.model_dump(by_alias=True, mode="json")
    assert data["globalVariables"] == {"token": "x"}
    assert Pipeline.model_validate(data) == pipeline


def test_service_descriptor() -> None:
    """服务与操作描述"""
    service = ServiceDescriptor(name="svc", openApiDocument={"paths": {}})
    assert service.id
    assert service.document == {"paths": {}}
    endpoint = OperationDescriptor(serviceId=service.id, path="/pets", method=HTTPMethod.DELETE)
    assert endpoint.label == "DELETE /pets"
