"""Static metadata describing CiviTest."""

APP_NAME = "CiviTest"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "CiviTest is an exam simulator for the French civic knowledge test. "
    "Each attempt draws 40 questions across five topics, runs against a 45 minute "
    "timer and keeps your results locally so you can follow your progress."
)

HELP_TEXT = (
    "Answer with the choice letter (A, B, C...), move with 'n' / 'p' or 'g <number>', "
    "'pause' freezes the timer, 'submit' ends the exam and 'quit' abandons it "
    "without saving."
)
