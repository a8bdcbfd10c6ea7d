from .bus import main

main()
