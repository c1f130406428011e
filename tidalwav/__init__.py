"""
Album submission service.

Artists submit an album (metadata, audio files and cover art) through a web
form. Submissions are stored alongside their uploaded assets, and an
administrator can review them, approve or reject them, and download each one
as a ZIP archive.
"""
