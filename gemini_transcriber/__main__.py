"""Package entry point for ``python -m gemini_transcriber``.

WHY: Users run ``python -m gemini_transcriber meeting.mp3`` for the CLI,
or ``python -m gemini_transcriber --serve`` for the web page and API.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
FastAPI app under uvicorn. Otherwise, delegates to the CLI's main().
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from gemini_transcriber.server.app import run_api
        run_api()
    else:
        from gemini_transcriber.cli import main
        main()
