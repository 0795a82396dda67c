"""QuizHub backend: quizzes, attempts, profiles and leaderboards."""
