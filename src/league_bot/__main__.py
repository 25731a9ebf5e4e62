from league_bot.clients.disc import run

run()
