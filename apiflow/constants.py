# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""常量数据"""

# 持久化存储中Pipeline快照的键
PIPELINE_STORAGE_KEY = "pipeline"
# 持久化存储中已注册服务列表的键
SERVICES_STORAGE_KEY = "services"
# 请求体/响应体只处理JSON内容
JSON_CONTENT_TYPE = "application/json"
# 参数缺省类型
DEFAULT_PORT_TYPE = "string"
# Splitter中无法确定类型的属性
UNKNOWN_PORT_TYPE = "unknown"
# 数组元素的合成属性名
ARRAY_ITEMS_NAME = "items"
# 原始类型响应的输出端口名
PRIMITIVE_RESPONSE_NAME = "response"
# 输入/输出节点使用的输出分组
PIPELINE_IO_GROUP = "default"
# 新建节点的默认位置
DEFAULT_NODE_POSITION = (100.0, 100.0)
# 推广输出的描述前缀
PROMOTED_DESCRIPTION_PREFIX = "Promoted from "
