"""命令行入口。

    llm-router [run] [--config PATH] [--memory PATH] [--max-rounds N]
    llm-router history [--memory PATH]

启动期错误（配置、凭据、记忆文件）在进入循环之前统一报告并以退出码 1 结束。
"""

import argparse
import sys
from typing import Callable, List, Optional, TextIO

from llm_router.agents.orchestrator import Orchestrator
from llm_router.agents.turn_executor import TurnExecutor
from llm_router.config.agents import load_agents_config
from llm_router.config.settings import settings
from llm_router.domain.exceptions import (
    ConfigError,
    CredentialError,
    LLMRouterError,
    PersistenceError,
    StoreError,
)
from llm_router.infrastructure.logging.logger import logger
from llm_router.infrastructure.storage.json_store import JsonConversationStore
from llm_router.interaction.console import ConsoleInterjectionChannel
from llm_router.providers.registry import ModelRegistry


EXIT_FATAL = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llm-router",
        description="Run a Builder/Judge conversation between two language models.",
    )
    # 不写子命令时等同于 run，所以 run 的选项在顶层也可用
    _add_run_options(parser, default=None)
    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="start or resume the conversation loop (default)")
    _add_run_options(run_p, default=argparse.SUPPRESS)

    hist_p = sub.add_parser("history", help="print the persisted conversation")
    hist_p.add_argument("--memory", default=argparse.SUPPRESS, help="conversation memory file")
    return parser


def _add_run_options(p: argparse.ArgumentParser, default) -> None:
    # 子命令用 SUPPRESS，避免覆盖写在子命令之前的同名选项
    p.add_argument("--config", default=default, help="agent configuration file (JSON or YAML)")
    p.add_argument("--memory", default=default, help="conversation memory file")
    p.add_argument("--max-rounds", type=int, default=default, help="stop after N builder/judge rounds")


def format_fatal(error: LLMRouterError) -> str:
    if isinstance(error, CredentialError):
        lines = ["Missing credentials:"]
        lines.extend(f"  - {var} (required by {role})" for var, role in error.missing)
        lines.append("Set them in the environment or in .env before starting.")
        return "\n".join(lines)
    return f"{type(error).__name__} [{error.code}]: {error.message}"


def run_command(
    config_path: Optional[str] = None,
    memory_path: Optional[str] = None,
    max_rounds: Optional[int] = None,
    registry: Optional[ModelRegistry] = None,
    input_fn: Callable[[str], str] = input,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    try:
        agents = load_agents_config(config_path or settings.agents_config_path)
        capabilities = (registry or ModelRegistry()).resolve_agents(agents.as_dict())
        store = JsonConversationStore(memory_path or settings.memory_path)
        store.load()
    except (ConfigError, CredentialError, StoreError) as e:
        logger.error("Startup failed", extra={"extra": {"error_code": e.code, "error": e.message}})
        print(format_fatal(e), file=err)
        return EXIT_FATAL

    by_model = {d.model_id: capabilities[role] for role, d in agents.as_dict().items()}
    executor = TurnExecutor(store=store, capabilities=by_model)
    orchestrator = Orchestrator(
        agents=agents,
        executor=executor,
        store=store,
        channel=ConsoleInterjectionChannel(input_fn=input_fn),
        display=lambda text: print(text, file=out, flush=True),
    )
    print("MCP conversation started.\n", file=out)
    try:
        orchestrator.run(max_rounds=max_rounds)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=err)
        return EXIT_INTERRUPTED
    except PersistenceError as e:
        logger.error("Persistence failed", extra={"extra": {"error_code": e.code, "error": e.message}})
        print(format_fatal(e), file=err)
        return EXIT_FATAL
    return 0


def history_command(
    memory_path: Optional[str] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    store = JsonConversationStore(memory_path or settings.memory_path)
    if not store.path.exists():
        print(f"No conversation memory at {store.path}", file=err)
        return EXIT_FATAL
    try:
        messages = store.load()
    except StoreError as e:
        print(format_fatal(e), file=err)
        return EXIT_FATAL
    for idx, m in enumerate(messages):
        print(f"[{idx}] {m.role}: {m.content}\n", file=out)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "history":
        return history_command(args.memory)
    return run_command(
        config_path=getattr(args, "config", None),
        memory_path=getattr(args, "memory", None),
        max_rounds=getattr(args, "max_rounds", None),
    )


if __name__ == "__main__":
    sys.exit(main())
