# iso code -> (display name, calling code)
# display names follow the carrier's country list, the calculator expects them verbatim
country_mapping = {
    "AE": ("United Arab Emirates", "+971"),
    "AL": ("Albania", "+355"),
    "AM": ("Armenia", "+374"),
    "AR": ("Argentina", "+54"),
    "AT": ("Austria", "+43"),
    "AU": ("Australia", "+61"),
    "AZ": ("Azerbaijan", "+994"),
    "BA": ("Bosnia and Herzegovina", "+387"),
    "BD": ("Bangladesh", "+880"),
    "BE": ("Belgium", "+32"),
    "BG": ("Bulgaria", "+359"),
    "BH": ("Bahrain", "+973"),
    "BN": ("Brunei", "+673"),
    "BR": ("Brazil", "+55"),
    "BY": ("Belarus", "+375"),
    "CA": ("Canada", "+1"),
    "CH": ("Switzerland", "+41"),
    "CL": ("Chile", "+56"),
    "CN": ("China", "+86"),
    "CO": ("Colombia", "+57"),
    "CR": ("Costa Rica", "+506"),
    "CY": ("Cyprus", "+357"),
    "CZ": ("Czech Republic", "+420"),
    "DE": ("Germany", "+49"),
    "DK": ("Denmark", "+45"),
    "DO": ("Dominican Republic", "+1"),
    "DZ": ("Algeria", "+213"),
    "EC": ("Ecuador", "+593"),
    "EE": ("Estonia", "+372"),
    "EG": ("Egypt", "+20"),
    "ES": ("Spain", "+34"),
    "FI": ("Finland", "+358"),
    "FJ": ("Fiji", "+679"),
    "FR": ("France", "+33"),
    "GB": ("United Kingdom", "+44"),
    "GE": ("Georgia", "+995"),
    "GH": ("Ghana", "+233"),
    "GR": ("Greece", "+30"),
    "GT": ("Guatemala", "+502"),
    "GU": ("Guam", "+1"),
    "HK": ("Hong Kong", "+852"),
    "HR": ("Croatia", "+385"),
    "HU": ("Hungary", "+36"),
    "ID": ("Indonesia", "+62"),
    "IE": ("Ireland", "+353"),
    "IL": ("Israel", "+972"),
    "IN": ("India", "+91"),
    "IS": ("Iceland", "+354"),
    "IT": ("Italy", "+39"),
    "JM": ("Jamaica", "+1"),
    "JO": ("Jordan", "+962"),
    "JP": ("Japan", "+81"),
    "KE": ("Kenya", "+254"),
    "KH": ("Cambodia", "+855"),
    "KR": ("South Korea", "+82"),
    "KW": ("Kuwait", "+965"),
    "KZ": ("Kazakhstan", "+7"),
    "LA": ("Laos", "+856"),
    "LB": ("Lebanon", "+961"),
    "LK": ("Sri Lanka", "+94"),
    "LT": ("Lithuania", "+370"),
    "LU": ("Luxembourg", "+352"),
    "LV": ("Latvia", "+371"),
    "MA": ("Morocco", "+212"),
    "MC": ("Monaco", "+377"),
    "MD": ("Moldova", "+373"),
    "ME": ("Montenegro", "+382"),
    "MK": ("North Macedonia", "+389"),
    "MM": ("Myanmar", "+95"),
    "MN": ("Mongolia", "+976"),
    "MO": ("Macau", "+853"),
    "MT": ("Malta", "+356"),
    "MU": ("Mauritius", "+230"),
    "MV": ("Maldives", "+960"),
    "MX": ("Mexico", "+52"),
    "MY": ("Malaysia", "+60"),
    "NG": ("Nigeria", "+234"),
    "NL": ("Netherlands", "+31"),
    "NO": ("Norway", "+47"),
    "NP": ("Nepal", "+977"),
    "NZ": ("New Zealand", "+64"),
    "OM": ("Oman", "+968"),
    "PA": ("Panama", "+507"),
    "PE": ("Peru", "+51"),
    "PG": ("Papua New Guinea", "+675"),
    "PH": ("Philippines", "+63"),
    "PK": ("Pakistan", "+92"),
    "PL": ("Poland", "+48"),
    "PR": ("Puerto Rico", "+1"),
    "PT": ("Portugal", "+351"),
    "QA": ("Qatar", "+974"),
    "RO": ("Romania", "+40"),
    "RS": ("Serbia", "+381"),
    "SA": ("Saudi Arabia", "+966"),
    "SE": ("Sweden", "+46"),
    "SG": ("Singapore", "+65"),
    "SI": ("Slovenia", "+386"),
    "SK": ("Slovakia", "+421"),
    "TH": ("Thailand", "+66"),
    "TL": ("Timor-Leste", "+670"),
    "TN": ("Tunisia", "+216"),
    "TR": ("Turkey", "+90"),
    "TT": ("Trinidad and Tobago", "+1"),
    "TW": ("Taiwan", "+886"),
    "TZ": ("Tanzania", "+255"),
    "UA": ("Ukraine", "+380"),
    "US": ("United States", "+1"),
    "UY": ("Uruguay", "+598"),
    "UZ": ("Uzbekistan", "+998"),
    "VN": ("Vietnam", "+84"),
    "ZA": ("South Africa", "+27"),
}
