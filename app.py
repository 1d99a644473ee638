#!/usr/bin/env python3
"""Word Finder Gradio app entry point."""

from word_finder.app.app import main

if __name__ == "__main__":
    main()
