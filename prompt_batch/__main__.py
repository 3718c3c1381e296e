from prompt_batch.main import main


main()
