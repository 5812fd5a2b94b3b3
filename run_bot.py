import sys

from chat_memory_bot.app import main


if __name__ == "__main__":
    try:
        main()
    except ValueError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        print("Fill DISCORD_TOKEN and GOOGLE_API_KEY in .env.", file=sys.stderr)
        raise SystemExit(2)
