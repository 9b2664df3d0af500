"""Built-in achievement definitions."""

from lecture_quest.models.achievement import (
    Achievement,
    AchievementCategory as C,
    AchievementDefinition,
)

# (id, name, description, category, xp_reward, max_progress)
_DEFINITIONS: list[tuple[str, str, str, C, int, int]] = [
    # Study milestones
    ("first_steps", "First Steps", "Complete your first lecture review", C.STUDY, 25, 1),
    ("first_lecture", "Opening Lecture", "Upload your first lecture", C.STUDY, 25, 1),
    ("five_lectures", "Getting Serious", "Upload 5 lectures", C.STUDY, 50, 5),
    ("dedicated_student", "Dedicated Student", "Complete 5 lectures", C.STUDY, 50, 5),
    ("ten_lectures", "Bookworm", "Upload 10 lectures", C.STUDY, 100, 10),
    ("knowledge_seeker", "Knowledge Seeker", "Upload 10 lectures", C.STUDY, 100, 10),
    ("twenty_five_lectures", "Lecture Hall Regular", "Upload 25 lectures", C.STUDY, 200, 25),
    ("fifty_lectures", "Library Card", "Upload 50 lectures", C.STUDY, 400, 50),
    ("hundred_lectures", "Walking Encyclopedia", "Upload 100 lectures", C.STUDY, 800, 100),
    ("first_quiz", "Quiz Taker", "Complete your first quiz", C.STUDY, 25, 1),
    ("ten_quizzes", "Quiz Enthusiast", "Complete 10 quizzes", C.STUDY, 75, 10),
    ("fifty_quizzes", "Quiz Veteran", "Complete 50 quizzes", C.STUDY, 250, 50),
    ("hundred_quizzes", "Quiz Legend", "Complete 100 quizzes", C.STUDY, 500, 100),
    ("xp_1000", "Rising Star", "Earn 1,000 XP", C.STUDY, 50, 1000),
    ("xp_5000", "XP Hunter", "Earn 5,000 XP", C.STUDY, 100, 5000),
    ("xp_10000", "XP Collector", "Earn 10,000 XP", C.STUDY, 200, 10000),
    ("xp_25000", "XP Hoarder", "Earn 25,000 XP", C.STUDY, 400, 25000),
    ("xp_50000", "XP Tycoon", "Earn 50,000 XP", C.STUDY, 800, 50000),
    # Perfect scores
    ("quick_learner", "Quick Learner", "Score 100% on any quiz", C.PERFECT, 25, 1),
    ("first_perfect", "Flawless", "Get your first perfect score", C.PERFECT, 25, 1),
    ("five_perfects", "Sharpshooter", "Get 5 perfect scores", C.PERFECT, 75, 5),
    ("ten_perfects", "Precision Learner", "Get 10 perfect scores", C.PERFECT, 150, 10),
    ("perfectionist", "Perfectionist", "Get 10 perfect scores", C.PERFECT, 150, 10),
    ("twenty_perfects", "Ace", "Get 20 perfect scores", C.PERFECT, 250, 20),
    ("thirty_perfects", "Untouchable", "Get 30 perfect scores", C.PERFECT, 350, 30),
    ("fifty_perfects", "Perfection Machine", "Get 50 perfect scores", C.PERFECT, 500, 50),
    ("seventy_five_perfects", "Immaculate", "Get 75 perfect scores", C.PERFECT, 750, 75),
    ("hundred_perfects", "Century of Perfection", "Get 100 perfect scores", C.PERFECT, 1000, 100),
    ("perfect_streak_3", "Hat Trick", "3 perfect scores in a row", C.PERFECT, 100, 3),
    ("perfect_streak_5", "On Fire", "5 perfect scores in a row", C.PERFECT, 200, 5),
    ("perfect_streak_10", "Unstoppable", "10 perfect scores in a row", C.PERFECT, 500, 10),
    ("perfect_on_first", "Natural Talent", "Score 100% on a lecture before any review", C.PERFECT, 100, 1),
    # Study-day streaks
    ("streak_3", "Warming Up", "3-day study streak", C.STREAK, 30, 3),
    ("streak_7", "Week Strong", "7-day study streak", C.STREAK, 70, 7),
    ("week_warrior", "Week Warrior", "7-day streak", C.STREAK, 70, 7),
    ("streak_14", "Fortnight Focus", "14-day study streak", C.STREAK, 140, 14),
    ("streak_21", "Habit Formed", "21-day study streak", C.STREAK, 210, 21),
    ("streak_30", "Monthly Warrior", "30-day study streak", C.STREAK, 300, 30),
    ("streak_45", "Relentless", "45-day study streak", C.STREAK, 450, 45),
    ("streak_60", "Two Months Strong", "60-day study streak", C.STREAK, 600, 60),
    ("streak_90", "Quarter Master", "90-day study streak", C.STREAK, 900, 90),
    ("streak_100", "Triple Digits", "100-day study streak", C.STREAK, 1000, 100),
    ("streak_150", "Iron Will", "150-day study streak", C.STREAK, 1500, 150),
    ("streak_180", "Half-Year Hero", "180-day study streak", C.STREAK, 1800, 180),
    ("streak_270", "Unbreakable", "270-day study streak", C.STREAK, 2700, 270),
    ("streak_365", "Year of Learning", "365-day study streak", C.STREAK, 3650, 365),
    ("streak_comeback", "Back on Track", "Start a new streak after losing a 7+ day one", C.STREAK, 50, 1),
    ("longest_streak_30", "Marathoner", "Reach a longest streak of 30 days", C.STREAK, 300, 30),
    # Time of day and calendar
    ("early_bird", "Early Bird", "Study before 8am", C.TIME, 25, 1),
    ("night_owl", "Night Owl", "Study after 10pm", C.TIME, 25, 1),
    ("lunch_learner", "Lunch Learner", "Study between noon and 1pm", C.TIME, 25, 1),
    ("weekend_warrior", "Weekend Warrior", "Study on a weekend", C.TIME, 25, 1),
    ("monday_motivation", "Monday Motivation", "Study on a Monday", C.TIME, 25, 1),
    ("friday_focus", "Friday Focus", "Study on a Friday", C.TIME, 25, 1),
    ("first_of_month", "Fresh Start", "Study on the first day of a month", C.TIME, 25, 1),
    ("late_night", "Burning the Midnight Oil", "Study between midnight and 3am", C.TIME, 25, 1),
    ("afternoon_ace", "Afternoon Ace", "Study between 2pm and 5pm", C.TIME, 25, 1),
    ("morning_routine", "Morning Routine", "Study in the morning 5 days in a row", C.TIME, 100, 5),
    # Improvement
    ("comeback_kid", "Comeback Kid", "Improve a daily quiz score by 20%+", C.IMPROVEMENT, 50, 1),
    ("improvement_15", "On the Rise", "Improve a daily quiz score by 15%+", C.IMPROVEMENT, 30, 1),
    ("improvement_30", "Big Leap", "Improve a daily quiz score by 30%+", C.IMPROVEMENT, 75, 1),
    ("improvement_50", "Breakthrough", "Improve a daily quiz score by 50%+", C.IMPROVEMENT, 150, 1),
    ("improvement_75", "Transformation", "Improve a daily quiz score by 75%+", C.IMPROVEMENT, 250, 1),
    ("perfect_turnaround", "Perfect Turnaround", "Go from under 50% to 100% on the same material", C.IMPROVEMENT, 150, 1),
    ("consistent_improver", "Consistent Improver", "Improve 5 quizzes in a row", C.IMPROVEMENT, 150, 5),
    ("bouncing_back", "Bouncing Back", "Go from under 50% to 80%+ on the same material", C.IMPROVEMENT, 75, 1),
    ("growth_mindset", "Growth Mindset", "Complete 10 daily reviews", C.IMPROVEMENT, 100, 10),
    ("mastery_journey", "Mastery Journey", "Review the same lecture 5 times", C.IMPROVEMENT, 100, 5),
    # Topic mastery
    ("first_mastery", "First Mastery", "Master your first topic", C.MASTERY, 50, 1),
    ("three_topics", "Triple Threat", "Master 3 topics", C.MASTERY, 75, 3),
    ("topic_master", "Topic Master", "Master 3 topics (score 80%+ twice)", C.MASTERY, 75, 3),
    ("five_topics", "Well Rounded", "Master 5 topics", C.MASTERY, 100, 5),
    ("ten_topics", "Subject Expert", "Master 10 topics", C.MASTERY, 200, 10),
    ("fifteen_topics", "Scholar", "Master 15 topics", C.MASTERY, 300, 15),
    ("twenty_topics", "Polymath", "Master 20 topics", C.MASTERY, 400, 20),
    ("twenty_five_topics", "Sage", "Master 25 topics", C.MASTERY, 500, 25),
    ("thirty_topics", "Mastermind", "Master 30 topics", C.MASTERY, 600, 30),
    ("fifty_topics", "Grandmaster", "Master 50 topics", C.MASTERY, 1000, 50),
    ("jack_of_trades", "Jack of All Trades", "Score 80%+ on 5 different lectures", C.MASTERY, 150, 5),
    ("specialist", "Specialist", "Score 80%+ on a lecture and review it twice", C.MASTERY, 75, 1),
    ("renaissance_learner", "Renaissance Learner", "Score 80%+ on 3 lectures", C.MASTERY, 100, 3),
    ("recall_regular", "Recall Regular", "Complete 50 scored topic reviews", C.MASTERY, 150, 50),
    ("long_term_memory", "Long-Term Memory", "Push a topic's review interval to 30+ days", C.MASTERY, 200, 1),
    # Social and competition
    ("first_friend", "Study Partner", "Add your first friend", C.SOCIAL, 25, 1),
    ("five_friends", "Study Group", "Add 5 friends", C.SOCIAL, 50, 5),
    ("ten_friends", "Popular Scholar", "Add 10 friends", C.SOCIAL, 100, 10),
    ("twenty_five_friends", "Campus Celebrity", "Add 25 friends", C.SOCIAL, 250, 25),
    ("leaderboard_top10", "Top Ten", "Reach the top 10 on the leaderboard", C.SOCIAL, 100, 1),
    ("leaderboard_top3", "Podium Finish", "Reach the top 3 on the leaderboard", C.SOCIAL, 200, 1),
    ("leaderboard_champion", "Champion", "Reach #1 on the leaderboard", C.SOCIAL, 500, 1),
    ("friendly_competition", "Friendly Competition", "Win a challenge against a friend", C.SOCIAL, 50, 1),
    ("study_buddy", "Study Buddy", "Complete a study session with a friend", C.SOCIAL, 50, 1),
    ("invite_accepted", "Recruiter", "Have a friend accept your invite", C.SOCIAL, 50, 1),
    # Daily quiz
    ("daily_first", "Daily Debut", "Complete your first daily quiz", C.DAILY, 25, 1),
    ("daily_10", "Daily Habit", "Complete 10 daily quizzes", C.DAILY, 75, 10),
    ("daily_25", "Daily Devotee", "Complete 25 daily quizzes", C.DAILY, 150, 25),
    ("daily_50", "Daily Dynamo", "Complete 50 daily quizzes", C.DAILY, 300, 50),
    ("daily_100", "Daily Centurion", "Complete 100 daily quizzes", C.DAILY, 600, 100),
    ("daily_200", "Daily Legend", "Complete 200 daily quizzes", C.DAILY, 1000, 200),
    ("week_of_dailies", "Week of Dailies", "Complete daily quizzes 7 days in a row", C.DAILY, 100, 7),
    ("month_of_dailies", "Month of Dailies", "Complete daily quizzes 30 days in a row", C.DAILY, 400, 30),
    ("daily_perfect", "Daily Perfection", "Score 100% on a daily quiz", C.DAILY, 50, 1),
    ("daily_streak_perfect", "Perfect Week", "7 perfect daily quizzes in a row", C.DAILY, 300, 7),
    # Special
    ("confident_scholar", "Confident Scholar", "Rate confidence 5/5", C.SPECIAL, 25, 1),
    ("confidence_master", "Confidence Master", "Rate confidence 5/5 on 10 lectures", C.SPECIAL, 150, 10),
    ("power_up_pro", "Power-Up Pro", "Use every kind of power-up", C.SPECIAL, 75, 3),
    ("calendar_connected", "Organized", "Connect your calendar", C.SPECIAL, 25, 1),
    ("batch_upload", "Bulk Learner", "Upload 5 lectures in one batch", C.SPECIAL, 50, 1),
    ("level_10", "Double Digits", "Reach level 10", C.SPECIAL, 250, 10),
    ("level_15", "Ultimate Master", "Reach level 15", C.SPECIAL, 500, 15),
]

ACHIEVEMENT_DEFINITIONS: tuple[AchievementDefinition, ...] = tuple(
    AchievementDefinition(
        id=achievement_id,
        name=name,
        description=description,
        category=category,
        xp_reward=xp_reward,
        max_progress=max_progress,
    )
    for achievement_id, name, description, category, xp_reward, max_progress in _DEFINITIONS
)

DEFINITIONS_BY_ID: dict[str, AchievementDefinition] = {
    definition.id: definition for definition in ACHIEVEMENT_DEFINITIONS
}


def initial_achievements() -> list[Achievement]:
    """Locked, zero-progress state for every built-in achievement."""
    return [Achievement.from_definition(d) for d in ACHIEVEMENT_DEFINITIONS]
