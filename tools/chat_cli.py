"""
Companionly Terminal Chat

Interactive terminal client for the Companionly support service.

Usage:
    python tools/chat_cli.py                                  # Interactive mode
    python tools/chat_cli.py --message "I feel anxious"       # Single turn
    python tools/chat_cli.py --endpoint https://host/chat     # Override COMPANIONLY_API_URL
"""

import asyncio
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.client import ClientConfig
from src.conversation import Message, MessageCategory
from src.orchestrator import ConversationController


DISCLAIMER = (
    "Disclaimer: Companionly is an AI support tool, not a substitute for "
    "professional medical advice, diagnosis, or treatment. "
    "If you are in crisis, please call 988."
)

CATEGORY_COLORS = {
    MessageCategory.INITIAL: "\033[94m",  # Blue
    MessageCategory.SUPPORT: "\033[96m",  # Cyan
    MessageCategory.CRISIS: "\033[91m",   # Red
}
RESET = "\033[0m"


def print_header(text: str):
    """Print formatted header."""
    print("\n" + "=" * 80)
    print(f"  {text}")
    print("=" * 80)


def print_message(message: Message):
    """Print one bot message with its label and optional source."""
    if not message.is_bot:
        return
    color = CATEGORY_COLORS.get(message.category, "")
    print(f"\n{color}[{message.display_name}]{RESET} {message.text}")
    if message.citation:
        print(f"  Source: {message.citation}")


def print_help():
    print("\nCommands:")
    print("  quit     - Exit chat")
    print("  config   - Show connection settings")
    print("  help     - Show this help")


async def send(controller: ConversationController, text: str):
    """Submit one turn and print the reply."""
    print("Waiting for Companionly...")
    accepted = await controller.submit(text)
    if accepted:
        print_message(controller.messages[-1])


async def interactive_mode(controller: ConversationController):
    """Run interactive chat loop."""
    print_header("Companionly AI Support")
    print_message(controller.messages[0])
    print_help()
    
    loop = asyncio.get_running_loop()
    
    while True:
        try:
            text = (await loop.run_in_executor(None, input, "\n> ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\nGoodbye!")
            break
        
        if not text:
            continue
        
        command = text.lower()
        if command == "quit":
            print("\nGoodbye!")
            break
        if command == "config":
            for key, value in controller.config.to_dict().items():
                print(f"  {key}: {value}")
            continue
        if command == "help":
            print_help()
            continue
        
        await send(controller, text)
    
    print(f"\n{DISCLAIMER}")


async def single_message_mode(controller: ConversationController, text: str):
    """Send a single message and exit."""
    print_header("Companionly AI Support")
    await send(controller, text)
    print(f"\n{DISCLAIMER}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Companionly terminal chat")
    parser.add_argument(
        "--endpoint",
        type=str,
        help="Service URL (default: COMPANIONLY_API_URL)"
    )
    parser.add_argument(
        "--message",
        type=str,
        help="Send a single message and exit"
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        help="Retry ceiling per message"
    )
    
    args = parser.parse_args()
    
    try:
        config = ClientConfig.from_env(endpoint=args.endpoint, max_attempts=args.max_attempts)
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(2)
    
    controller = ConversationController(config)
    
    try:
        if args.message:
            asyncio.run(single_message_mode(controller, args.message))
        else:
            asyncio.run(interactive_mode(controller))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")


if __name__ == "__main__":
    main()
