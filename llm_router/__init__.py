"""LLM Router 顶层包。

该包让两个语言模型 Agent（Builder 与 Judge）轮流对话，
包括模型解析、提示词拼装、轮次编排、单轮故障隔离、
只追加的对话记忆持久化以及轮次之间的人类插话。
"""

__version__ = "0.1.0"
