from country_info.main import run

run()
