"""Prompt composition for the text, code and music tools."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(slots=True)
class LengthPreset:
    """Target length for generated prose."""

    name: str
    words: str
    max_length: int


LENGTH_PRESETS: Dict[str, LengthPreset] = {
    "short": LengthPreset(name="short", words="100-200 words", max_length=200),
    "medium": LengthPreset(name="medium", words="300-500 words", max_length=500),
    "long": LengthPreset(name="long", words="600-1000 words", max_length=1000),
}

TEXT_TYPES = ["article", "blog post", "social media post", "email", "story", "product description"]
TONES = ["professional", "casual", "friendly", "formal", "persuasive", "humorous"]
MUSIC_GENRES = ["pop", "rock", "jazz", "classical", "electronic", "ambient", "hip hop"]

LANGUAGE_EXTENSIONS: Dict[str, str] = {
    "javascript": ".js",
    "python": ".py",
    "html": ".html",
    "css": ".css",
    "json": ".json",
    "typescript": ".ts",
    "java": ".java",
    "cpp": ".cpp",
    "csharp": ".cs",
}

_CODE_FENCE = re.compile(r"```[\w+#-]*\n?([\s\S]*?)```")


def length_preset(name: str) -> LengthPreset:
    """Return the preset for ``name``, falling back to medium."""
    return LENGTH_PRESETS.get((name or "").lower(), LENGTH_PRESETS["medium"])


def build_text_prompt(prompt: str, text_type: str, tone: str, length: str) -> str:
    preset = length_preset(length)
    system_prompt = (
        f"You are a professional {text_type} writer. Write in a {tone} tone.\n"
        f"Length should be {preset.words}."
    )
    return f"{system_prompt}\n\nUser request: {prompt.strip()}"


def strip_echo(generated: str, full_prompt: str) -> str:
    """Remove the prompt the model echoed back in front of its answer."""
    return generated.replace(full_prompt, "").strip()


def build_code_prompt(request: str, language: str, framework: Optional[str] = None) -> str:
    using = f" using {framework}" if framework and framework != "none" else ""
    system_prompt = (
        f"You are a professional {language} developer. Generate clean, well-documented "
        f"{language} code{using}.\n"
        "Include comments explaining key parts. Follow best practices and modern conventions. "
        "Only return the code, no explanations."
    )
    return f"{system_prompt}\n\nUser request: {request.strip()}\n\nCode:"


def extract_code_block(text: str) -> str:
    """Return the body of the first fenced block, or the whole text if none."""
    cleaned = (text or "").strip()
    if "```" in cleaned:
        match = _CODE_FENCE.search(cleaned)
        if match:
            return match.group(1).strip()
    return cleaned


def extension_for(language: str) -> str:
    return LANGUAGE_EXTENSIONS.get((language or "").lower(), ".txt")


def build_music_prompt(prompt: str, genre: str, duration: int) -> str:
    return f"{genre} music, {duration} seconds, {prompt.strip()}"


# Editor contents shown when the user switches language.
LANGUAGE_TEMPLATES: Dict[str, str] = {
    "javascript": """// JavaScript Example
function calculateSum(a, b) {
    return a + b;
}

const result = calculateSum(5, 3);
console.log("Sum:", result);""",
    "python": """# Python Example
def calculate_sum(a, b):
    return a + b

result = calculate_sum(5, 3)
print("Sum:", result)""",
    "html": """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>My Web Page</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 40px; }
        h1 { color: #333; }
    </style>
</head>
<body>
    <h1>Hello, World!</h1>
    <p>Welcome to my web page.</p>
</body>
</html>""",
    "css": """/* CSS Example */
body {
    font-family: Arial, sans-serif;
    background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
    margin: 0;
    padding: 20px;
}

.container {
    max-width: 800px;
    margin: 0 auto;
    background: white;
    padding: 20px;
    border-radius: 10px;
    box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1);
}""",
    "json": """{
  "name": "My Project",
  "version": "1.0.0",
  "description": "A sample JSON configuration",
  "main": "index.js",
  "scripts": {
    "start": "node index.js",
    "test": "echo \\"Error: no test specified\\" && exit 1"
  },
  "keywords": ["javascript", "node"],
  "author": "Developer",
  "license": "MIT"
}""",
    "typescript": """// TypeScript Example
interface User {
    name: string;
    age: number;
}

function greetUser(user: User): string {
    return `Hello, ${user.name}! You are ${user.age} years old.`;
}

const user: User = { name: "Developer", age: 25 };
console.log(greetUser(user));""",
    "java": """// Java Example
public class HelloWorld {
    public static void main(String[] args) {
        System.out.println("Hello, World!");

        int sum = calculateSum(5, 3);
        System.out.println("Sum: " + sum);
    }

    public static int calculateSum(int a, int b) {
        return a + b;
    }
}""",
    "cpp": """// C++ Example
#include <iostream>
using namespace std;

int calculateSum(int a, int b) {
    return a + b;
}

int main() {
    cout << "Hello, World!" << endl;

    int result = calculateSum(5, 3);
    cout << "Sum: " << result << endl;

    return 0;
}""",
    "csharp": """// C# Example
using System;

class Program {
    static void Main() {
        Console.WriteLine("Hello, World!");

        int result = CalculateSum(5, 3);
        Console.WriteLine($"Sum: {result}");
    }

    static int CalculateSum(int a, int b) {
        return a + b;
    }
}""",
}

# File extension (without the dot) to editor language; .c files open as C++.
EXTENSION_LANGUAGES: Dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "html": "html",
    "css": "css",
    "json": "json",
    "java": "java",
    "cpp": "cpp",
    "c": "cpp",
    "cs": "csharp",
}


def template_for(language: str) -> str:
    return LANGUAGE_TEMPLATES.get((language or "").lower(), "")


def language_for_filename(filename: str) -> Optional[str]:
    """Detect the editor language from a file name, or None when unknown."""
    _, dot, extension = (filename or "").rpartition(".")
    if not dot:
        return None
    return EXTENSION_LANGUAGES.get(extension.lower())
