"""Minimal demonstration of single-turn and batch dispatch."""

import argparse

from agent_relay import Agent, BatchDispatcher
from agent_relay.config.settings import Settings, load_agent_config
from agent_relay.infrastructure.logging.logger import setup_logger


def main() -> None:
    parser = argparse.ArgumentParser(description="Send prompts to the configured provider")
    parser.add_argument("prompts", nargs="+", help="prompt text; several prompts run as one batch")
    parser.add_argument("--batch", action="store_true", help="run every prompt concurrently in its own conversation")
    args = parser.parse_args()

    settings = Settings()
    setup_logger(settings.log_dir, settings.log_redact_content)
    config = load_agent_config(settings)

    if args.batch:
        for reply in BatchDispatcher(config).run_batch(args.prompts):
            print("Agent:", reply.content)
        return

    agent = Agent(config)
    for prompt in args.prompts:
        agent.add_user_message(prompt)
        reply = agent.send_request()
        print("User:", prompt)
        print("Agent:", reply.content)
        if agent.pending_tool_calls:
            names = ", ".join(call.name for call in agent.pending_tool_calls)
            print(f"(model requested tools: {names}; no tool layer attached)")
            break


if __name__ == "__main__":
    main()
