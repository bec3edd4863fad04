"""Static metadata describing QuizProctor."""

APP_NAME = "QuizProctor"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizProctor lets professors author multiple-choice quizzes by hand, from a text file, "
    "or from a generated topic, and lets students take them under a timer with focus monitoring."
)

HELP_TEXT = (
    "Import quizzes from a .txt file using the format below. Blocks are separated by a blank "
    "line or '---'. Any number of options from A onwards is accepted (at least two).\n\n"
    "Q: What is the capital of France?\n"
    "A: Berlin\nB: Paris\nC: Madrid\nD: Rome\n"
    "CORRECT: B\nEXPLANATION: Paris has been the capital since 987.\n\n"
    "Q: What is 6 x 7?\n"
    "A: 41\nB: 42\n"
    "CORRECT: B"
)
