from gtfsrt_validator.server import main

main()
