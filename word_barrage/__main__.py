"""Package entry point for ``python -m word_barrage``.

WHY: Operators start the state authority or a headless simulation with
``python -m word_barrage serve`` / ``python -m word_barrage simulate``.

HOW: Delegates straight to the CLI's main().
"""

from word_barrage.cli import main

if __name__ == "__main__":
    main()
