"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "QuizProctor"
STUDENT_URL_PLACEHOLDER: str = "http://<professor-ip>:8000/"

MODE_BUTTON_TAKE: str = "Take Quiz"
MODE_BUTTON_PROFESSOR: str = "Professor Dashboard"

JOIN_CODE_PLACEHOLDER: str = "Quiz code (e.g. AB12CD)"
JOIN_NAME_PLACEHOLDER: str = "Full name"
JOIN_ROLL_PLACEHOLDER: str = "Roll number"
JOIN_EMAIL_PLACEHOLDER: str = "Email"
JOIN_BUTTON: str = "Start Quiz"

SESSION_PREV_BUTTON: str = "Previous"
SESSION_NEXT_BUTTON: str = "Next"
SESSION_SUBMIT_BUTTON: str = "Submit Quiz"
SESSION_TIMER_TEMPLATE: str = "Time left: {minutes:02d}:{seconds:02d}"
SESSION_POSITION_TEMPLATE: str = "Question {position} of {total}"
CONFIRM_SUBMIT_TITLE: str = "Submit quiz"
CONFIRM_SUBMIT_MESSAGE: str = "Are you sure you want to submit? You cannot change your answers afterwards."

RESULT_SCORE_TEMPLATE: str = "You scored {score} out of {total}."
RESULT_REVIEW_BUTTON: str = "Review Answers"
RESULT_DONE_BUTTON: str = "Done"
REVIEW_EXIT_BUTTON: str = "Back to Result"

LOGIN_EMAIL_PLACEHOLDER: str = "Professor email"
LOGIN_SECRET_PLACEHOLDER: str = "Password"
LOGIN_BUTTON: str = "Log In"
REGISTER_BUTTON: str = "Register"

DASHBOARD_IMPORT_BUTTON: str = "Import Quiz File"
DASHBOARD_EXPORT_BUTTON: str = "Export Selected Quiz"
DASHBOARD_TOPIC_BUTTON: str = "Generate From Topic"
DASHBOARD_TEXT_BUTTON: str = "Generate From Document Text"
DASHBOARD_RESULTS_BUTTON: str = "View Results"
DASHBOARD_ANSWER_KEY_BUTTON: str = "View Answer Key"
DASHBOARD_REFRESH_BUTTON: str = "Refresh"
DASHBOARD_REVIEW_ATTEMPT_BUTTON: str = "Review Attempt"
DASHBOARD_LOGOUT_BUTTON: str = "Log Out"
DASHBOARD_EMPTY_STATE: str = "No quizzes yet. Import or generate one to get started."
DASHBOARD_QUIZ_TEMPLATE: str = "{code}  |  {title}  |  {count} question(s), {duration} min"
DASHBOARD_RESULT_TEMPLATE: str = "{name} ({roll}, {email}): {score}/{total}{suffix}"

IMPORT_DIALOG_TITLE: str = "Select quiz file"
IMPORT_FILE_FILTER: str = "Quiz files (*.txt);;All files (*.*)"
EXPORT_DIALOG_TITLE: str = "Save quiz to file"
EXPORT_FILE_FILTER: str = "Quiz files (*.txt);;All files (*.*)"
TEXT_SOURCE_DIALOG_TITLE: str = "Select document text"
TEXT_SOURCE_FILE_FILTER: str = "Text files (*.txt *.md);;All files (*.*)"

NO_QUIZ_SELECTED_MESSAGE: str = "Please select a quiz first."
