from war_council.main import main

main()
