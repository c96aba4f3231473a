"""Quest catalog.

Quests are immutable values. Each ``QuestTest`` says how it is checked:
``stdout`` tests need the code to run in the sandbox, ``source`` tests only
inspect the submitted text (used for markup and DOM exercises that have no
runtime here).
"""
import enum
from dataclasses import dataclass, field
from typing import Optional


class Difficulty(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class QuestLanguage(str, enum.Enum):
    javascript = "javascript"
    python = "python"
    html = "html"
    css = "css"


class CheckKind(str, enum.Enum):
    stdout = "stdout"
    source = "source"


@dataclass(frozen=True)
class QuestTest:
    test_id: str
    description: str
    expected: str
    check: CheckKind = CheckKind.stdout
    is_hidden: bool = False


@dataclass(frozen=True)
class Hint:
    level: int
    content: str
    cost: int


@dataclass(frozen=True)
class Quest:
    quest_id: str
    title: str
    description: str
    difficulty: Difficulty
    language: QuestLanguage
    category: str
    xp_reward: int
    coin_reward: int
    starter_code: str
    tests: tuple[QuestTest, ...]
    hints: tuple[Hint, ...] = ()
    prerequisites: tuple[str, ...] = ()
    estimated_minutes: int = 5
    is_premium: bool = False

    def hint(self, level: int) -> Optional[Hint]:
        return next((h for h in self.hints if h.level == level), None)

    @property
    def needs_runtime(self) -> bool:
        return any(t.check is CheckKind.stdout for t in self.tests)


QUESTS: tuple[Quest, ...] = (
    Quest(
        quest_id="intro-variables",
        title="Variables & Data Types",
        description="Learn how to declare and use variables in JavaScript",
        difficulty=Difficulty.beginner,
        language=QuestLanguage.javascript,
        category="fundamentals",
        xp_reward=100,
        coin_reward=50,
        starter_code=(
            "// Create a variable called 'playerName' and assign it your name\n"
            "// Create a variable called 'playerLevel' and assign it the number 1\n"
            "// Create a variable called 'hasCompletedTutorial' and assign it false\n\n"
            "console.log('Player:', playerName);\n"
            "console.log('Level:', playerLevel);\n"
            "console.log('Tutorial completed:', hasCompletedTutorial);\n"
        ),
        tests=(QuestTest("test-1", "Should declare playerName variable", "Player: Coder"),),
        hints=(
            Hint(1, 'Use the "let" keyword to declare a variable: let variableName = value;', 10),
            Hint(2, 'Strings should be wrapped in quotes: "text here"', 20),
        ),
        estimated_minutes=5,
    ),
    Quest(
        quest_id="basic-functions",
        title="Functions Fundamentals",
        description="Master the art of creating and calling functions",
        difficulty=Difficulty.beginner,
        language=QuestLanguage.javascript,
        category="fundamentals",
        xp_reward=150,
        coin_reward=75,
        starter_code=(
            "// Create greetPlayer(name) returning \"Hello, [name]! Welcome to VinStack Code!\"\n"
            "// Create calculateXP(level, multiplier) returning level * multiplier * 100\n\n"
            "console.log(greetPlayer(\"Alice\"));\n"
            "console.log(\"XP for level 5:\", calculateXP(5, 1.5));\n"
        ),
        tests=(
            QuestTest("test-1", "greetPlayer function should work correctly",
                      "Hello, Alice! Welcome to VinStack Code!"),
        ),
        hints=(Hint(1, "Function syntax: function functionName(parameters) { return value; }", 15),),
        prerequisites=("intro-variables",),
        estimated_minutes=8,
    ),
    Quest(
        quest_id="python-lists",
        title="Lists & Loops in Python",
        description="Collect scores in a list and total them with a loop",
        difficulty=Difficulty.beginner,
        language=QuestLanguage.python,
        category="fundamentals",
        xp_reward=120,
        coin_reward=60,
        starter_code=(
            "# Create a list called 'scores' holding 10, 20 and 30\n"
            "# Add them up with a for loop into 'total'\n\n"
            "print('Total:', total)\n"
            "print('Count:', len(scores))\n"
        ),
        tests=(
            QuestTest("test-1", "Should print the total of all scores", "Total: 60"),
            QuestTest("test-2", "Should print how many scores there are", "Count: 3"),
        ),
        hints=(Hint(1, "Start with total = 0 and use: for score in scores: total += score", 10),),
        estimated_minutes=6,
    ),
    Quest(
        quest_id="html-basics",
        title="HTML Structure Mastery",
        description="Build your first web page with proper HTML structure",
        difficulty=Difficulty.beginner,
        language=QuestLanguage.html,
        category="web-dev",
        xp_reward=120,
        coin_reward=60,
        starter_code=(
            "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n  <title>Player Profile</title>\n</head>\n<body>\n"
            "  <!-- Add a main heading with \"Player Profile\" -->\n"
            "  <!-- Add a section with class \"player-info\" -->\n"
            "</body>\n</html>\n"
        ),
        tests=(
            QuestTest("test-1", "Should have main heading", "<h1>Player Profile</h1>", CheckKind.source),
            QuestTest("test-2", "Should have a player-info section", 'class="player-info"', CheckKind.source),
        ),
        hints=(Hint(1, "Use <h1> for main headings and <h2> for subheadings", 10),),
        estimated_minutes=10,
    ),
    Quest(
        quest_id="css-styling",
        title="CSS Styling Magic",
        description="Transform your HTML with beautiful CSS styles",
        difficulty=Difficulty.intermediate,
        language=QuestLanguage.css,
        category="web-dev",
        xp_reward=200,
        coin_reward=100,
        starter_code=(
            "/* Style .character-card with a gradient background, padding and border radius */\n"
            "/* Add a hover effect that scales the card */\n"
        ),
        tests=(
            QuestTest("test-1", "Should have gradient background", "linear-gradient", CheckKind.source),
            QuestTest("test-2", "Should have a hover effect", ":hover", CheckKind.source),
        ),
        hints=(Hint(1, "Use linear-gradient() for gradient backgrounds", 15),),
        prerequisites=("html-basics",),
        estimated_minutes=15,
        is_premium=True,
    ),
    Quest(
        quest_id="js-dom",
        title="DOM Manipulation Quest",
        description="Learn to control web pages with JavaScript",
        difficulty=Difficulty.intermediate,
        language=QuestLanguage.javascript,
        category="web-dev",
        xp_reward=250,
        coin_reward=125,
        starter_code=(
            "// Create updatePlayerStats(name, level, xp) that fills #player-name, #player-level, #player-xp\n"
            "// Create addQuestToList(questName) that appends an <li> to #quest-list\n"
        ),
        tests=(
            QuestTest("test-1", "Should select elements by id", "document.getElementById", CheckKind.source),
            QuestTest("test-2", "Should create list items", "createElement", CheckKind.source),
        ),
        hints=(Hint(1, "Use document.getElementById() to select elements", 20),),
        prerequisites=("basic-functions", "html-basics"),
        estimated_minutes=20,
        is_premium=True,
    ),
)

_BY_ID = {q.quest_id: q for q in QUESTS}


def get_quest(quest_id: str) -> Optional[Quest]:
    return _BY_ID.get(quest_id)
