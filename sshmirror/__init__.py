"""sshmirror: one-way live mirror of a local directory tree over SFTP"""

__version__ = "0.1.0"
