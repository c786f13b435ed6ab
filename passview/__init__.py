"""
PassView: copy and edit secrets of a pass(1) password store.

LEGAL NOTICE:
This tool is for personal use only. It reads and writes the password store of
the user running it, on the device where it is installed. Copied passwords are
erased from the clipboard after a timeout.
"""
