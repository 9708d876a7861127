#!/usr/bin/env python3
"""
GitHub Review Request Unsubscriber
Unsubscribes from pull request notifications you were asked to review.
"""

from review_unsubscribe.cli import main


if __name__ == "__main__":
    main()
