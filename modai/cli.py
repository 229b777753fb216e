"""
Modai CLI - interactive prompt around the agentic loop
"""
import argparse
import shlex
import sys
from typing import Any, Dict, List, Optional, Tuple

from modai.agent import AgenticLoop, LoopState
from modai.config import DEBUG, LOG_PATH, MODAI_HOME, Colors, ModaiConfig
from modai.exceptions import ModaiError
from modai.managers import LoadFailure, PluginStore, ToolManager
from modai.protocol import Directive, ToolResult
from modai.providers import PROVIDERS, create_provider
from modai.tools import get_plugin_tools, get_tools
from modai.utils import EventLog, format_block, to_json

BANNER = r"""
      ___ ___   ___  ___   _   ___
     |  \/  | / _ \|   \ /_\ |_ _|
     | |\/| || (_) | |) / _ \ | |
     |_|  |_| \___/|___/_/ \_\___|
"""

HELP_TEXT = """Modai CLI Commands:
  /help                    - Show this help message
  /tools                   - List available tools
  /tool <name> <k> <v> ... - Execute a tool with arguments
  /install <owner>/<repo>  - Install a Modai tool from a GitHub repository
  /update [name]           - Update installed Modai tools (or a specific tool)
  /uninstall <name>        - Uninstall a Modai tool
  /list                    - List all installed Modai tools
  /quit, /exit             - Exit the CLI

Example tool usage:
  /tool exec command "ls -la"
  /tool file action read path /etc/hosts

Or just chat naturally and let the AI use tools for you!"""


def parse_tool_command(command: str) -> Tuple[str, Dict[str, str]]:
    """
    Split ``name k1 v1 k2 v2`` into a tool name and an argument mapping.

    Values may be quoted. A trailing key without a value is ignored.
    """
    parts = shlex.split(command)
    if not parts:
        raise ValueError("Usage: /tool <name> <key> <value> ...")
    name, rest = parts[0], parts[1:]
    args = {rest[i]: rest[i + 1] for i in range(0, len(rest) - 1, 2)}
    return name, args


def confirm_directive(directive: Directive) -> bool:
    """Ask on the terminal before a tool call runs; Enter means yes"""
    print(format_block(
        "Tool Execution Confirmation",
        f"Execute tool '{directive.tool}' with arguments:\n{to_json(directive.arguments, indent=2)}",
        Colors.YELLOW,
    ))
    try:
        answer = input(f"{Colors.YELLOW}Do you want to proceed? (Y/n): {Colors.RESET}").strip().lower()
    except EOFError:
        return False
    return answer in ("", "y", "yes")


def render_result(directive: Directive, result: ToolResult):
    if not result.success:
        print(f"{Colors.RED}❌ Tool {directive.tool} failed{Colors.RESET}")
        print(format_block("Error", result.error or "", Colors.RED))
        return

    print(f"{Colors.GREEN}✅ Tool {directive.tool} executed successfully{Colors.RESET}")
    data = result.data
    if DEBUG:
        print(format_block("Debug Output", to_json(result.to_dict(), indent=2), Colors.GRAY))
    if isinstance(data, dict):
        if data.get("stdout") not in (None, ""):
            print(format_block("Output", str(data["stdout"])))
        elif data.get("content"):
            print(format_block("Content", str(data["content"])))
        elif data.get("items"):
            lines = [f"{'📁' if item.get('type') == 'directory' else '📄'} {item.get('name')}" for item in data["items"]]
            print(format_block("Files/Directories", "\n".join(lines)))


class ModaiCLI:
    """Reads commands and chat messages from the terminal"""

    def __init__(self, config: ModaiConfig, provider=None, store: Optional[PluginStore] = None,
                 event_log: Optional[EventLog] = None, interactive: bool = True):
        self.config = config
        self.event_log = event_log or EventLog(LOG_PATH)
        self.store = store or PluginStore(MODAI_HOME)
        self.tools = ToolManager(get_tools())
        for tool in get_plugin_tools(self.store, self.tools):
            self.tools.register(tool)

        self.load_failures: List[LoadFailure] = []
        if not config.no_user_tools:
            results = self.tools.load_plugins(self.store)
            self.load_failures = [r for r in results if isinstance(r, LoadFailure)]

        self.loop = AgenticLoop(
            provider or create_provider(config, self.event_log),
            self.tools,
            confirm=confirm_directive if interactive else None,
            on_tool_result=render_result,
            event_log=self.event_log,
        )

    def run_tool(self, name: str, args: Dict[str, Any]) -> ToolResult:
        return self.loop.execute_directive(Directive(tool=name, arguments=args))

    def _print_result(self, result: ToolResult, success_title: str):
        if result.success:
            body = result.data if isinstance(result.data, str) else to_json(result.data, indent=2)
            print(format_block(success_title, body, Colors.GREEN))
        else:
            print(format_block("Failed", result.error or "", Colors.RED))

    def show_tools(self):
        lines = []
        for meta in self.tools.list():
            lines.append(f"  - {meta.name}\n    Description: {meta.description}\n    Example: {meta.example}")
        print(format_block("Available tools", "\n".join(lines), max_length=10000))

    def handle_line(self, line: str) -> bool:
        """Handle one input line; returns False when the session should end"""
        line = line.strip()
        if not line:
            return True
        if line in ("/quit", "/exit"):
            print(f"{Colors.YELLOW}Goodbye!{Colors.RESET}")
            return False
        if line == "/help":
            print(format_block("Help", HELP_TEXT, max_length=10000))
        elif line == "/tools":
            self.show_tools()
        elif line.startswith("/tool "):
            try:
                name, args = parse_tool_command(line[len("/tool "):])
            except ValueError as e:
                print(f"{Colors.RED}{e}{Colors.RESET}")
                return True
            self._print_result(self.run_tool(name, args), "Tool result")
        elif line.startswith("/install "):
            self._print_result(self.run_tool("install", {"repo": line[len("/install "):].strip()}), "Installed")
        elif line == "/update" or line.startswith("/update "):
            name = line[len("/update"):].strip()
            self._print_result(self.run_tool("update", {"toolName": name} if name else {}), "Update")
        elif line.startswith("/uninstall "):
            self._print_result(self.run_tool("uninstall", {"name": line[len("/uninstall "):].strip()}), "Uninstalled")
        elif line == "/list":
            self._print_result(self.run_tool("list", {}), "Installed Tools")
        else:
            self.chat(line)
        return True

    def chat(self, message: str):
        print(f"{Colors.CYAN}🤔 Thinking...{Colors.RESET}")
        outcome = self.loop.handle_chat(message)
        if outcome.state is LoopState.ABORTED_MAX_TURNS:
            print(f"{Colors.RED}⚠️ Reached max turns ({outcome.turns}), stopping to prevent infinite loop.{Colors.RESET}")
            print(format_block("Partial response", outcome.response, Colors.YELLOW, max_length=4000))
            return
        if outcome.response.strip():
            print(f"\n{Colors.CYAN}🤖 Assistant:{Colors.RESET}\n{outcome.response}\n")

    def run(self):
        print(f"{Colors.CYAN}{BANNER}{Colors.RESET}")
        print(f"{Colors.GRAY}Type /help for commands or just chat naturally\n---{Colors.RESET}")
        for failure in self.load_failures:
            print(f"{Colors.YELLOW}[Warning] Could not load tool '{failure.name}': {failure.reason}{Colors.RESET}")

        while True:
            try:
                line = input(f"{Colors.GREEN}{self.config.name}> {Colors.RESET}")
                if not self.handle_line(line):
                    break
            except (KeyboardInterrupt, EOFError):
                print("\n\nExiting...")
                break
            except ModaiError as e:
                print(f"\n{Colors.RED}[Error] {e}{Colors.RESET}")


def parse_args(argv: Optional[List[str]] = None) -> ModaiConfig:
    defaults = ModaiConfig.from_env()
    parser = argparse.ArgumentParser(prog="modai", description="Chat with a model that can run tools.")
    parser.add_argument("--provider", default=defaults.provider, choices=sorted(PROVIDERS))
    parser.add_argument("--api-key", default=defaults.api_key)
    parser.add_argument("--base-url", default=defaults.base_url)
    parser.add_argument("--model", default=defaults.model)
    parser.add_argument("--name", default=defaults.name)
    parser.add_argument("--no-user-tools", action="store_true", help="Skip loading installed plugin tools")
    args = parser.parse_args(argv)
    return ModaiConfig(
        provider=args.provider,
        api_key=args.api_key,
        base_url=args.base_url,
        model=args.model,
        no_user_tools=args.no_user_tools,
        name=args.name,
    )


def main(argv: Optional[List[str]] = None):
    """Entry point for the modai CLI"""
    config = parse_args(argv)
    try:
        cli = ModaiCLI(config)
    except (ModaiError, ValueError) as e:
        print(f"{Colors.RED}❌ Failed to start CLI: {e}{Colors.RESET}")
        sys.exit(1)
    cli.run()


if __name__ == "__main__":
    main()
