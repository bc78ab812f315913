from zhs_courtwatch.cli import main

if __name__ == "__main__":
    main()
