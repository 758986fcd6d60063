"""Cache TTL settings for per-user read endpoints"""

# Cache TTL (Time To Live) configurations in seconds
CACHE_TTL = {
    "course_progress": 300,     # 5 minutes
    "lecture_progress": 300,    # 5 minutes
    "my_enrollments": 180,      # 3 minutes
    "my_certificates": 600,     # 10 minutes
    "course_list": 300,         # 5 minutes
}
