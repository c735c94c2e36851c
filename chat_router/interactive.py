#!/usr/bin/env python3
"""
Chat Router Interactive CLI

Talk to the tool-calling loop from a terminal, without the HTTP server.
History lives only for the session.
"""

import argparse
import json
import logging
import sys
from typing import Optional

from .config import config
from .errors import ChatRouterError
from .llm_call import LLMClient
from .orchestration import OrchestrationLoop
from .tools import get_registry

logger = logging.getLogger(__name__)

HELP_TEXT = """
Available commands:
  /help     - Show this help message
  /tools    - List available tools
  /trace    - Show the tool rounds of the last reply
  /clear    - Clear conversation history
  /quit     - Exit the CLI

Type your message below.
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def print_tools() -> None:
    print("\nAvailable Tools:")
    print("─" * 64)
    print(get_registry().get_tools_summary())
    print()


def print_trace(loop: Optional[OrchestrationLoop]) -> None:
    """Print the tool rounds of the last run."""
    trace = loop.get_trace() if loop else []
    if not trace:
        print("\nNo trace available. Send a message first.\n")
        return

    print("\n" + "═" * 70)
    for step in trace:
        print(f"┌─ Round {step['step']}" + ("  [FINAL]" if step["is_final"] else ""))
        for call, result in zip(step["tool_calls"], step["results"]):
            print(f"│  Tool: {call['name']} {json.dumps(call['arguments'])}")
            payload = json.dumps(result["payload"], ensure_ascii=False)
            if len(payload) > 200:
                payload = payload[:200] + "..."
            print(f"│  {'Result' if result['ok'] else 'Error'}: {payload}")
        print("└" + "─" * 68)
    print()


class InteractiveCLI:
    """Interactive chat session."""

    def __init__(self, llm_client: LLMClient, enable_tools: bool = True):
        self.llm_client = llm_client
        self.enable_tools = enable_tools
        self.history: list[dict] = []
        self.last_loop: Optional[OrchestrationLoop] = None

    def ask(self, message: str) -> str:
        """Send one message, recording both turns in the session history."""
        loop = OrchestrationLoop(
            llm_client=self.llm_client,
            max_iterations=config.model.max_iterations,
        )
        self.last_loop = loop
        outcome = loop.run(message, history=self.history, enable_tools=self.enable_tools)
        self.history.append({"role": "user", "content": message})
        self.history.append({"role": "assistant", "content": outcome.final_text})
        suffix = f"\n(used tools: {', '.join(outcome.tool_names)})" if outcome.tools_used else ""
        return outcome.final_text + suffix

    def run(self) -> None:
        """Run the interactive loop."""
        print("Chat Router Interactive")
        print(HELP_TEXT)

        while True:
            try:
                user_input = input(">>> ").strip()
            except KeyboardInterrupt:
                print("\n\nType /quit to exit.\n")
                continue
            except EOFError:
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
                    print(HELP_TEXT)
                elif command == "/tools":
                    print_tools()
                elif command == "/trace":
                    print_trace(self.last_loop)
                elif command == "/clear":
                    self.history = []
                    print("\nConversation history cleared.\n")
                else:
                    print(f"\nUnknown command: {user_input}")
                    print("Type /help for available commands.\n")
                continue

            try:
                print("\n" + self.ask(user_input) + "\n")
            except ChatRouterError as e:
                print(f"\nError: {e}\n")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Chat Router Interactive CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                # Start interactive mode
  %(prog)s -q "What's the weather in Oslo?"  # Send a single message
  %(prog)s --no-tools -q "Tell me a joke"    # Plain chat, no tools
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-q", "--query", type=str, help="Send a single message and exit")
    parser.add_argument("--no-tools", action="store_true", help="Do not offer tools to the model")
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help=f"Chat-completion endpoint (default: {config.model.base_url})",
    )
    parser.add_argument("--json", action="store_true", help="Output results as JSON (for scripting)")
    args = parser.parse_args()

    setup_logging(args.verbose)

    llm_client = LLMClient(base_url=args.base_url)
    cli = InteractiveCLI(llm_client, enable_tools=not args.no_tools)
    try:
        if args.query:
            try:
                reply = cli.ask(args.query)
            except ChatRouterError as e:
                print(f"Error: {e}", file=sys.stderr)
                sys.exit(1)
            if args.json:
                output = {
                    "message": args.query,
                    "reply": cli.history[-1]["content"],
                    "trace": cli.last_loop.get_trace() if cli.last_loop else [],
                }
                print(json.dumps(output, indent=2, ensure_ascii=False))
            else:
                print(reply)
        else:
            cli.run()
    finally:
        llm_client.close()


if __name__ == "__main__":
    main()
