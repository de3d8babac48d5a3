from telegram_archive.app import main

main()
