from jigsaw_madness.app import main

if __name__ == "__main__":
    main()
