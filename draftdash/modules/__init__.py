"""
Draftdash Modules - Black Box Architecture

Every subpackage exports its public interface from __init__ and keeps the
rest private. The capture module composes browser, interceptor and session;
league and config stand alone. main.py wires them together.
"""
