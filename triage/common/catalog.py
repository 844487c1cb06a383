"""
Scoring Catalog

Fixed weights, thresholds and keyword sets shared by the scorer and the learner.
Everything here is data; behavior lives in the classifier and learning packages.
"""

# Score bands (0-100 scale)
SCORE_CRITICAL_MIN = 70
SCORE_IMPORTANT_MIN = 40
SCORE_NORMAL_MIN = 15
SCORE_MIN = 0
SCORE_MAX = 100

# Base importance weights
BASE_WEIGHT_BANKING = 80
BASE_WEIGHT_MESSAGING = 60
BASE_WEIGHT_EMAIL = 50
BASE_WEIGHT_SOCIAL = 35
BASE_WEIGHT_ENTERTAINMENT = 15
BASE_WEIGHT_GAMES = 10
BASE_WEIGHT_DEFAULT = 30

# Keyword scoring
KEYWORD_WEIGHT_CRITICAL = 20
KEYWORD_WEIGHT_IMPORTANT = 10
KEYWORD_WEIGHT_SPAM = -8
KEYWORD_WEIGHT_FINANCIAL = 15
KEYWORD_SCORE_MIN = -30
KEYWORD_SCORE_MAX = 40
CUSTOM_KEYWORD_MODIFIER_LIMIT = 30

# Frequency penalty: (max notifications in the last hour, multiplier), ascending
FREQUENCY_TIERS = (
    (2, 1.0),
    (5, 0.9),
    (10, 0.7),
    (20, 0.5),
)
FREQUENCY_SPAM_MULTIPLIER = 0.3

# Behavior learning
BEHAVIOR_MAX_ADJUSTMENT = 20
PREFERENCE_MAX_SCORE = 20
LEARNING_MIN_SAMPLES = 5
SUGGESTION_MIN_SAMPLES = 10
QUICK_DISMISS_THRESHOLD_MS = 3000

# Highest tier met wins within a signal: (rate threshold, adjustment), descending
OPEN_RATE_TIERS = ((0.8, 15), (0.6, 10), (0.4, 5))
DISMISS_RATE_TIERS = ((0.6, -12), (0.4, -8))
IGNORE_RATE_TIERS = ((0.7, -15), (0.5, -10), (0.3, -5))

# Spam / engagement heuristics
SPAMMY_LAST_HOUR = 10
SPAMMY_AVG_PER_DAY = 30
HIGH_ENGAGEMENT_OPEN_RATE = 0.7
IGNORED_CONTENT_RATE = 0.8

# Advisory override
ADVISORY_CONFIDENCE_THRESHOLD = 0.7
ADVISORY_BOOST = 15
ADVISORY_BOOST_FLOOR = 70
ADVISORY_SUPPRESS = 15
ADVISORY_SUPPRESS_CEILING = 30

# Rolling windows
HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


CRITICAL_KEYWORDS = frozenset({
    "otp", "verification code", "security code", "authentication",
    "failed", "failure", "declined", "rejected", "denied",
    "urgent", "emergency", "critical", "alert", "warning",
    "suspicious activity", "unauthorized", "breach", "fraud",
    "password reset", "account locked", "verify your identity",
    "payment failed", "transaction declined", "insufficient funds",
    "missed call", "voicemail", "alarm", "reminder", "due now",
    "expires today", "last chance", "time sensitive", "immediate action",
})

IMPORTANT_KEYWORDS = frozenset({
    "message", "replied", "mentioned you", "tagged you",
    "shared with you", "sent you", "commented", "reacted",
    "delivery", "shipped", "out for delivery", "arriving",
    "appointment", "meeting", "scheduled", "confirmed",
    "invoice", "receipt", "payment", "charged", "subscription",
    "update", "new version", "upgrade", "download",
    "from:", "to:", "re:", "fwd:",
    "booking", "reservation", "ticket", "order",
})

SPAM_KEYWORDS = frozenset({
    "new video", "uploaded", "live now", "streaming",
    "watch now", "click here", "tap to open", "check this out",
    "sale", "discount", "offer", "deal", "promo", "coupon",
    "free", "win", "prize", "reward", "claim", "gift",
    "like this", "follow", "subscribe", "share",
    "recommended for you", "you might like", "trending",
    "game", "level up", "achievement", "daily bonus",
    "energy refilled", "lives restored", "new content",
    "news:", "breaking:", "story", "article", "post",
    "add friend", "friend suggestion", "people you may know",
})

FINANCIAL_KEYWORDS = frozenset({
    "bank", "account", "balance", "transaction", "transfer",
    "credit card", "debit card", "payment", "deposit", "withdrawal",
    "statement", "bill", "due", "overdue", "pending",
    "upi", "paytm", "gpay", "phonepe", "wallet",
})


# App categories. Banking ids are matched as substrings, the rest exactly.
BANKING_APPS = frozenset({
    "com.google.android.apps.nbu.paisa.user",
    "net.one97.paytm",
    "com.phonepe.app",
    "com.axis.mobile",
    "com.sbi.lotusintouch",
    "com.hdfc.mobile",
    "com.icicibank.pockets",
})

MESSAGING_APPS = frozenset({
    "com.whatsapp",
    "com.whatsapp.w4b",
    "org.telegram.messenger",
    "com.discord",
    "com.snapchat.android",
    "com.facebook.orca",
    "com.google.android.apps.messaging",
    "com.samsung.android.messaging",
})

EMAIL_APPS = frozenset({
    "com.google.android.gm",
    "com.microsoft.office.outlook",
    "com.yahoo.mobile.client.android.mail",
    "com.samsung.android.email.provider",
})

SOCIAL_APPS = frozenset({
    "com.instagram.android",
    "com.facebook.katana",
    "com.twitter.android",
    "com.linkedin.android",
    "com.reddit.frontpage",
    "com.tumblr",
    "com.pinterest",
})

ENTERTAINMENT_APPS = frozenset({
    "com.google.android.youtube",
    "com.netflix.mediaclient",
    "com.spotify.music",
    "com.amazon.avod.thirdpartyclient",
    "com.hotstar.android",
})
