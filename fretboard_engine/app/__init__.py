"""
App Subpackage

    - cli.py: Command line interface (`fretboard-gen`)
"""
