"""
Resume Studio
Resume-building backend with AI-assisted tailoring.

Architecture:
- SQL database (PostgreSQL, SQLite for tests): users, profiles, jobs, resumes, applications
- MongoDB: AI response cache (optional)
- OpenAI-compatible provider: job analysis, rewriting, recommendations
- LaTeX (moderncv) resume output rendered from Jinja2 templates
"""

__version__ = "1.0.0"
