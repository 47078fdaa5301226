from .app import DreamRhythmApp


def main() -> None:
    DreamRhythmApp().run()


if __name__ == "__main__":
    main()
