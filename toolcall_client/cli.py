#!/usr/bin/env python3
"""
toolcall-client command line interface

A thin wrapper around LLMClient for trying the tool-calling loop against
an endpoint. The ``calculate`` tool is offered to the model.
"""

import argparse
import json
import logging
import sys
from typing import Optional

import requests

from .config import Config
from .config_loader import load_config
from .errors import ToolcallClientError
from .llm_call import LLMClient
from .schemas import CompletionRequestPayload, Message, MessageRole
from .tools import ToolRegistry, calculate_tool
from .tracing import init_tracing_client, shutdown_tracing

logger = logging.getLogger(__name__)

BANNER = """
toolcall-client interactive

Commands:
  /help     - Show this help message
  /history  - Show the conversation so far
  /tools    - List available tools
  /clear    - Clear conversation history
  /quit     - Exit the CLI
"""


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Configure logging on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_payload(
    history: list[Message],
    query: str,
    model: str = "",
) -> CompletionRequestPayload:
    """Payload for one turn: prior history plus the new user message."""
    return CompletionRequestPayload(
        model=model,
        messages=[*history, Message(role=MessageRole.USER, content=query)],
        tools=[calculate_tool()],
    )


def print_history(history: list[Message]) -> None:
    if not history:
        print("\nNo conversation yet.\n")
        return
    print()
    for msg in history:
        if msg.tool_calls:
            calls = ", ".join(
                f"{c.function.name}({c.function.arguments})" for c in msg.tool_calls
            )
            print(f"[{msg.role}] -> {calls}")
        elif msg.tool_call_id:
            print(f"[{msg.role} {msg.tool_call_id}] {msg.content}")
        else:
            print(f"[{msg.role}] {msg.content}")
    print()


class InteractiveCLI:
    """REPL that keeps one conversation across turns."""

    def __init__(self, client: LLMClient, system: Optional[str] = None):
        self.client = client
        self.system = system
        self.history: list[Message] = []
        self.clear_history()

    def clear_history(self) -> None:
        self.history = []
        if self.system:
            self.history.append(Message(role=MessageRole.SYSTEM, content=self.system))

    def process_query(self, query: str) -> None:
        payload = build_payload(self.history, query)
        try:
            answer = self.client.get_completion(payload)
        except (ToolcallClientError, requests.RequestException) as e:
            print(f"\nError: {e}\n")
            return
        self.history = list(payload.messages)
        print(f"\n{answer}\n")

    def run(self) -> None:
        print(BANNER)
        while True:
            try:
                user_input = input(">>> ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nGoodbye!\n")
                break

            if not user_input:
                continue

            if user_input.startswith("/"):
                command = user_input.lower()
                if command in ("/quit", "/exit", "/q"):
                    print("\nGoodbye!\n")
                    break
                elif command in ("/help", "/h", "/?"):
                    print(BANNER)
                elif command == "/history":
                    print_history(self.history)
                elif command == "/tools":
                    payload = build_payload([], "")
                    print("\n" + ToolRegistry.from_payload(payload).get_tools_summary() + "\n")
                elif command == "/clear":
                    self.clear_history()
                    print("\nConversation history cleared.\n")
                else:
                    print(f"\nUnknown command: {user_input}")
                    print("Type /help for available commands.\n")
            else:
                self.process_query(user_input)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Chat with an OpenAI-compatible model that can call local tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Start interactive mode
  %(prog)s -q "What is 3^8 - 17?"   # Run a single query
  %(prog)s -q "..." --json          # Answer plus full message history
""",
    )
    parser.add_argument("-q", "--query", type=str, help="Run a single query and exit")
    parser.add_argument("-s", "--system", type=str, help="System prompt")
    parser.add_argument("--model", type=str, default=None, help="Model name")
    parser.add_argument("--base-url", type=str, default=None, help="API base URL")
    parser.add_argument(
        "--max-iterations",
        type=_positive_int,
        default=None,
        help="Maximum completion requests per query",
    )
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON (for scripting)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    return parser


def run_single_query(client: LLMClient, args: argparse.Namespace) -> int:
    history = [Message(role=MessageRole.SYSTEM, content=args.system)] if args.system else []
    payload = build_payload(history, args.query)
    try:
        answer = client.get_completion(payload, max_iterations=args.max_iterations)
    except (ToolcallClientError, requests.RequestException) as e:
        if args.json:
            print(json.dumps({"query": args.query, "error": str(e)}, indent=2))
        else:
            print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        output = {
            "query": args.query,
            "answer": answer,
            "messages": [m.to_dict() for m in payload.messages],
            "trace": client.get_trace(),
        }
        print(json.dumps(output, indent=2))
    else:
        print(answer)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config: Config = load_config(args.config)
    setup_logging(config.log_level, args.verbose)

    if config.langfuse.enabled:
        init_tracing_client(
            public_key=config.langfuse.public_key,
            secret_key=config.langfuse.secret_key,
            host=config.langfuse.host,
            debug=config.langfuse.debug,
        )

    client = LLMClient(
        base_url=args.base_url,
        model=args.model,
        max_iterations=args.max_iterations,
        settings=config.client,
    )
    try:
        if args.query:
            return run_single_query(client, args)
        InteractiveCLI(client, system=args.system).run()
        return 0
    finally:
        client.close()
        shutdown_tracing()


if __name__ == "__main__":
    sys.exit(main())
