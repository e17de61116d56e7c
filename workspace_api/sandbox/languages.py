"""Interpreters and package managers the sandbox knows how to launch."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Interpreter:
    command: str
    extension: str


LANGUAGES: dict[str, Interpreter] = {
    "python": Interpreter(command="python3", extension="py"),
    "javascript": Interpreter(command="node", extension="js"),
    "ruby": Interpreter(command="ruby", extension="rb"),
    "php": Interpreter(command="php", extension="php"),
    "shell": Interpreter(command="bash", extension="sh"),
}


def get_interpreter(language: str) -> Interpreter | None:
    return LANGUAGES.get(language)


def supported_languages() -> list[str]:
    return list(LANGUAGES)


def unsupported_language_message(language: str) -> str:
    return (
        f"Language {language} not directly supported. "
        f"Supported languages: {', '.join(supported_languages())}\n\n"
        "Note: For compiled languages (C, C++, Java, Go, Rust), please install "
        "the required compilers/runtimes on the server first."
    )


def unsupported_ecosystem_message(ecosystem: str) -> str:
    return f"Package installation not supported for {ecosystem}"
