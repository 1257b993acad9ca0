# src/sharelink/__main__.py
from sharelink.app import main

main()
